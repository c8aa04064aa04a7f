"""Renderer package for LockCraft text layout and wallpaper composition."""

from .composition import (
    CompositionOptions,
    Placement,
    compose,
    cover_placement,
    linear_gradient,
    paint_background,
    radial_gradient,
)
from .devices import DEFAULT_DEVICE_NAME, DeviceCatalog, default_catalog, device_from_dict, get_device, list_devices
from .errors import InvalidBackground, RenderError
from .fonts import SYSTEM_FONT, FontResolver
from .layout import (
    MAXIMUM_FONT_SIZE,
    MINIMUM_FONT_SIZE,
    FitResult,
    LayoutOptions,
    TextBlock,
    fit_and_render_text,
    fit_text,
    fits,
    measure_text,
)
from .models import (
    RGBA,
    Alignment,
    BackgroundSpec,
    Bitmap,
    DeviceProfile,
    EdgeInsets,
    Frosted,
    Gradient,
    Linear,
    Radial,
    Rect,
    SolidColor,
    TextLayer,
    TextStyle,
    Transform,
    parse_color,
)

__all__ = [
    "DEFAULT_DEVICE_NAME",
    "MAXIMUM_FONT_SIZE",
    "MINIMUM_FONT_SIZE",
    "RGBA",
    "SYSTEM_FONT",
    "Alignment",
    "BackgroundSpec",
    "Bitmap",
    "CompositionOptions",
    "DeviceCatalog",
    "DeviceProfile",
    "EdgeInsets",
    "FitResult",
    "FontResolver",
    "Frosted",
    "Gradient",
    "InvalidBackground",
    "LayoutOptions",
    "Linear",
    "Placement",
    "Radial",
    "Rect",
    "RenderError",
    "SolidColor",
    "TextBlock",
    "TextLayer",
    "TextStyle",
    "Transform",
    "compose",
    "cover_placement",
    "default_catalog",
    "device_from_dict",
    "fit_and_render_text",
    "fit_text",
    "fits",
    "get_device",
    "linear_gradient",
    "list_devices",
    "measure_text",
    "paint_background",
    "parse_color",
    "radial_gradient",
]
