import io

from PIL import Image

from core.discovery.placeholder import PlaceholderBadgeGenerator


def test_renders_a_png_badge():
    generator = PlaceholderBadgeGenerator(size=128)

    badge = generator.generate("Snow Leopard")

    image = Image.open(io.BytesIO(badge.image_bytes))
    assert image.format == "PNG"
    assert image.size == (128, 128)
    assert badge.extra == {"generator": "placeholder"}
    assert generator.calls == 1


def test_palette_ignores_case():
    assert PlaceholderBadgeGenerator._palette("Lion") == PlaceholderBadgeGenerator._palette("LION")
    assert PlaceholderBadgeGenerator._palette("Lion") != PlaceholderBadgeGenerator._palette("Tiger")
