"""Markdown reference served by the learn_mood_primitives tool."""

from __future__ import annotations

GEOMETRIES = """\
# Three.js Geometries for Abstract Art

## Basic Shapes
```javascript
// Sphere - Great for peaceful, organic moods
new THREE.SphereGeometry(radius, widthSegments, heightSegments)

// Box - Solid, stable, structured moods
new THREE.BoxGeometry(width, height, depth)

// Icosahedron - Energetic, complex moods
new THREE.IcosahedronGeometry(radius, detail)

// Octahedron - Sharp, dynamic moods
new THREE.OctahedronGeometry(radius, detail)

// Torus - Flowing, continuous moods
new THREE.TorusGeometry(radius, tube, radialSegments, tubularSegments)

// TorusKnot - Complex, intricate moods
new THREE.TorusKnotGeometry(radius, tube, tubularSegments, radialSegments)
```

## Particle Systems
```javascript
// Points for particle effects
const geometry = new THREE.BufferGeometry();
const positions = new Float32Array(count * 3);
geometry.setAttribute('position', new THREE.BufferAttribute(positions, 3));
const points = new THREE.Points(geometry, pointsMaterial);
```
"""

MATERIALS = """\
# Three.js Materials for Mood Expression

## Standard Material (Recommended)
```javascript
// Best for realistic lighting
new THREE.MeshStandardMaterial({
  color: 0x7ec8e3,      // Soft blue for peace
  roughness: 0.4,        // Lower = more reflective
  metalness: 0.1,        // Higher = more metallic
  emissive: 0x000000,    // Self-illumination color
  emissiveIntensity: 0   // Glow strength
})
```

## Emissive/Glow Effects
```javascript
// For neon/glow effects
new THREE.MeshStandardMaterial({
  color: 0xff00ff,
  emissive: 0xff00ff,
  emissiveIntensity: 0.5
})
// Combine with UnrealBloomPass for best results
```

## Color Palettes by Mood
- **Peace**: #7ec8e3, #b4e7ce, #f5d9e8 (soft pastels)
- **Energy**: #ff4444, #ff8800, #ffff00 (warm, vibrant)
- **Chaos**: High contrast pairs, random hues
- **Sadness**: #2d3436, #636e72, #b2bec3 (muted blues/grays)
"""

LIGHTING = """\
# Three.js Lighting for Atmosphere

## Basic Setup
```javascript
// Always include ambient light
scene.add(new THREE.AmbientLight(0x404040, 0.6));

// Main directional light (keep intensity <= 1)
const light = new THREE.DirectionalLight(0xffffff, 0.8);
light.position.set(3, 5, 3);
scene.add(light);
```

## Mood-Specific Lighting
```javascript
// Peaceful - soft, even lighting
new THREE.AmbientLight(0x404060, 0.8);
new THREE.DirectionalLight(0xffffff, 0.5);

// Energetic - strong contrasts
new THREE.PointLight(0xff4400, 1, 10);
new THREE.SpotLight(0xffff00, 0.8);

// Mysterious - low ambient, focused spots
new THREE.AmbientLight(0x101020, 0.3);
new THREE.SpotLight(0x0066ff, 0.7, 10, Math.PI / 6);
```

## Post-Processing Bloom
```javascript
const composer = new EffectComposer(renderer);
composer.addPass(new RenderPass(scene, camera));
composer.addPass(new UnrealBloomPass(
  new THREE.Vector2(width, height),
  0.5,  // strength
  0.4,  // radius
  0.85  // threshold
));
// Use composer.render() instead of renderer.render()
```
"""

ANIMATION = """\
# Three.js Animation Patterns

## Basic Animation Loop
```javascript
function animate() {
  requestAnimationFrame(animate);
  cube.rotation.y += 0.01;
  controls.update();
  renderer.render(scene, camera);
}
animate();
```

## Floating Motion (Peace)
```javascript
const time = Date.now() * 0.001;
object.position.y += Math.sin(time * speed + offset) * 0.005;
```

## Pulsing Effect (Energy)
```javascript
const scale = 1 + Math.sin(time * 3) * 0.1;
object.scale.setScalar(scale);
```

## Orbital Motion
```javascript
object.position.x = Math.cos(time * speed) * radius;
object.position.z = Math.sin(time * speed) * radius;
```

## Chaotic Movement
```javascript
object.position.x += (Math.random() - 0.5) * 0.02;
object.position.y += (Math.random() - 0.5) * 0.02;
object.rotation.x += (Math.random() - 0.5) * 0.01;
```

## Easing Functions
```javascript
// Smooth ease-in-out
const eased = (1 - Math.cos(progress * Math.PI)) / 2;

// Bounce
const bounce = Math.abs(Math.sin(time * 5)) * 0.5;
```
"""

_SECTIONS = {
    "geometries": GEOMETRIES,
    "materials": MATERIALS,
    "lighting": LIGHTING,
    "animation": ANIMATION,
}

MOOD_PRIMITIVES_DOCUMENTATION: dict[str, str] = {
    **_SECTIONS,
    "all": (
        "# Three.js Mood Primitives - Complete Reference\n\n"
        + "\n---\n\n".join(f"{text}\n" for text in _SECTIONS.values())
    ),
}

# Order matters: surfaced as the topic enum in the tool schema.
PRIMITIVE_TOPICS: tuple[str, ...] = ("geometries", "materials", "lighting", "animation", "all")


def primitives_documentation(topic: str = "all") -> str:
    """Return the reference text for ``topic``.

    Raises:
        KeyError: If ``topic`` is not one of ``PRIMITIVE_TOPICS``.
    """
    return MOOD_PRIMITIVES_DOCUMENTATION[topic]
