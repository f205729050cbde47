"""Small RGBA layer helpers shared by the watermark and caption drawing."""
from PIL import Image, ImageFilter


def new_layer(size: tuple[int, int]) -> Image.Image:
    return Image.new("RGBA", size, (0, 0, 0, 0))


def scale_alpha(layer: Image.Image, factor: float) -> Image.Image:
    """Copy of `layer` with its alpha multiplied by factor (0..1)."""
    if factor >= 1.0:
        return layer.copy()
    out = layer.copy()
    alpha = out.getchannel("A").point(lambda a: int(a * factor + 0.5))
    out.putalpha(alpha)
    return out


def composite_with_shadow(
    canvas: Image.Image,
    layer: Image.Image,
    shadow_alpha: float,
    shadow_blur: float,
) -> None:
    """
    Composite `layer` onto `canvas` in place with a soft black drop shadow
    derived from the layer's own alpha (no offset, blurred).
    """
    alpha = layer.getchannel("A")
    shadow_mask = alpha.point(lambda a: int(a * shadow_alpha + 0.5))
    if shadow_blur > 0:
        # canvas-style blur values are roughly twice the gaussian sigma
        shadow_mask = shadow_mask.filter(ImageFilter.GaussianBlur(radius=shadow_blur / 2))
    shadow = Image.new("RGBA", layer.size, (0, 0, 0, 0))
    shadow.putalpha(shadow_mask)
    canvas.alpha_composite(shadow)
    canvas.alpha_composite(layer)
