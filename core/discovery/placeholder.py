# Path: core/discovery/placeholder.py
# Purpose: Provide an offline badge generator rendering simple PNG badges with Pillow.
# Layer: core/discovery.
# Details: Used for simulated discoveries, demo seeding, and running without a generation endpoint.

from __future__ import annotations

import hashlib
import io
from typing import Tuple

from PIL import Image, ImageDraw, ImageFont

from core.models.domain import GeneratedBadge

from .base import BadgeGenerator


class PlaceholderBadgeGenerator(BadgeGenerator):
    """Deterministic stand-in for the remote generator; colours derive from the species name."""

    name = "placeholder"

    def __init__(self, size: int = 256) -> None:
        self.size = size
        self.calls = 0

    def generate(self, animal_name: str) -> GeneratedBadge:
        self.calls += 1
        image = self._render(animal_name)
        buffer = io.BytesIO()
        image.save(buffer, "PNG")
        return GeneratedBadge(image_bytes=buffer.getvalue(), extra={"generator": self.name})

    def _render(self, animal_name: str) -> Image.Image:
        size = self.size
        image = Image.new("RGBA", (size, size), color=(0, 0, 0, 0))
        draw = ImageDraw.Draw(image)

        fill, outline = self._palette(animal_name)
        margin = size // 16
        draw.ellipse([margin, margin, size - margin, size - margin], fill=fill, outline=outline, width=max(2, size // 32))

        label = animal_name.strip()[:14] or "?"
        font = ImageFont.load_default()
        left, top, right, bottom = draw.textbbox((0, 0), label, font=font)
        draw.text(((size - (right - left)) / 2, (size - (bottom - top)) / 2), label, fill=(255, 255, 255, 255), font=font)
        return image

    @staticmethod
    def _palette(animal_name: str) -> Tuple[Tuple[int, int, int, int], Tuple[int, int, int, int]]:
        digest = hashlib.sha256(animal_name.lower().encode("utf-8")).digest()
        fill = (64 + digest[0] % 128, 64 + digest[1] % 128, 64 + digest[2] % 128, 255)
        outline = (fill[0] // 2, fill[1] // 2, fill[2] // 2, 255)
        return fill, outline
