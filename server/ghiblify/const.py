STYLE_PROMPT = """
Redraw this photo as a hand-painted Studio Ghibli animation still.
Keep the original composition, the people, their poses and expressions,
and the main objects exactly where they are. Use soft watercolor
backgrounds, gentle natural light, warm pastel colors, clean expressive
line work and the calm, nostalgic atmosphere of classic Ghibli films.
Do not add text, logos, borders or extra characters.
"""

GENERATION_COST = 1

# Declared content type -> formats Pillow may decode it as (MPO is multi-frame JPEG from phone cameras).
ALLOWED_IMAGE_FORMATS = {
    "image/jpeg": ("JPEG", "MPO"),
    "image/png": ("PNG",),
    "image/webp": ("WEBP",),
}
