"""
Printable box labels.
Uses PIL/Pillow and python-barcode to render a Code128 barcode of the box
reference id with the box number, location and shelf printed around it.
"""
import io
import base64
import logging
from typing import Optional

from PIL import Image, ImageDraw, ImageFont
import barcode
from barcode.writer import ImageWriter

logger = logging.getLogger(__name__)


def _load_fonts():
    try:
        return (
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf', 22),
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 14),
            ImageFont.truetype('/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf', 12),
        )
    except (OSError, IOError):
        try:
            return (
                ImageFont.truetype('arial.ttf', 22),
                ImageFont.truetype('arial.ttf', 14),
                ImageFont.truetype('arial.ttf', 12),
            )
        except (OSError, IOError):
            default = ImageFont.load_default()
            return default, default, default


def _draw_centered(draw, text, y, font, width):
    bbox = draw.textbbox((0, 0), text, font=font)
    text_width = bbox[2] - bbox[0]
    draw.text(((width - text_width) // 2, y), text, fill='black', font=font)
    return bbox[3] - bbox[1]


def render_box_label(
    box_number: str,
    reference_id: str,
    location_name: Optional[str] = None,
    shelf_name: Optional[str] = None,
    description: Optional[str] = None,
    width: int = 400,  # 4 inches at 100 DPI
    height: int = 240,
) -> bytes:
    """
    Render a box label as PNG bytes.

    Layout, top to bottom: box number, location/shelf line, barcode of the
    reference id, the reference id in text, and a truncated description.
    """
    margin = 10
    font_large, font_medium, font_small = _load_fonts()

    img = Image.new('RGB', (width, height), color='white')
    draw = ImageDraw.Draw(img)

    y = 8
    y += _draw_centered(draw, f"BOX {box_number}", y, font_large, width) + 6

    place = ' / '.join(part for part in (location_name, shelf_name) if part)
    if place:
        y += _draw_centered(draw, place[:40], y, font_medium, width) + 6

    footer_height = 40 if description else 22
    barcode_available_height = height - y - footer_height

    try:
        code128 = barcode.get_barcode_class('code128')
        barcode_img = code128(reference_id, writer=ImageWriter()).render({
            'write_text': False,
            'module_width': 0.3,
            'module_height': 15.0,
            'quiet_zone': 2.0,
            'font_size': 0,
            'text_distance': 0,
            'background': 'white',
            'foreground': 'black',
        })

        barcode_img_width, barcode_img_height = barcode_img.size
        barcode_width = width - (2 * margin)
        scale_factor = barcode_width / barcode_img_width
        scaled_height = int(barcode_img_height * scale_factor)
        if scaled_height > barcode_available_height:
            scale_factor = barcode_available_height / barcode_img_height
            scaled_height = barcode_available_height
            barcode_width = int(barcode_img_width * scale_factor)

        barcode_img = barcode_img.resize((barcode_width, scaled_height), Image.Resampling.BILINEAR)
        img.paste(barcode_img, ((width - barcode_width) // 2, y))
        y += scaled_height + 4
    except Exception as e:
        # Fall back to a text-only label so printing still works
        logger.error(f"Barcode generation failed for '{reference_id}': {str(e)}", exc_info=True)

    y += _draw_centered(draw, reference_id, y, font_small, width) + 4

    if description:
        text = description if len(description) <= 45 else description[:45] + '...'
        _draw_centered(draw, text, y, font_small, width)

    buffer = io.BytesIO()
    img.save(buffer, format='PNG', optimize=False, compress_level=1)
    data = buffer.getvalue()
    buffer.close()
    img.close()
    return data


def render_box_label_for(box) -> bytes:
    """PNG label for a Box instance"""
    return render_box_label(
        box_number=box.box_number,
        reference_id=box.reference_id or f"BOX-{str(box.box_number).zfill(4)}",
        location_name=box.location.name if box.location_id else None,
        shelf_name=box.shelf.name if box.shelf_id else None,
        description=box.description,
    )


def render_box_label_data_url(box) -> str:
    """Base64 PNG data URL for a Box instance"""
    png = render_box_label_for(box)
    return f"data:image/png;base64,{base64.b64encode(png).decode('utf-8')}"
