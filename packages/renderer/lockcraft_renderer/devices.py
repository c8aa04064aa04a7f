"""Built-in device catalog."""

from __future__ import annotations

from typing import Iterable

from .models import DeviceProfile, EdgeInsets

DEFAULT_DEVICE_NAME = "iPhone 12 Pro Max"

BUILTIN_DEVICES: dict[str, DeviceProfile] = {
    "iPhone 12 Pro Max": DeviceProfile(
        name="iPhone 12 Pro Max",
        canvas_width=1284,
        canvas_height=2778,
        safe_insets=EdgeInsets(top=200, left=0, bottom=150, right=0),
    ),
    "iPhone 15 Pro": DeviceProfile(
        name="iPhone 15 Pro",
        canvas_width=1179,
        canvas_height=2556,
        safe_insets=EdgeInsets(top=200, left=0, bottom=150, right=0),
    ),
}


def device_from_dict(raw: dict) -> DeviceProfile:
    insets = raw.get("safe_insets", {}) or {}
    return DeviceProfile(
        name=str(raw["name"]),
        canvas_width=int(raw["canvas_width"]),
        canvas_height=int(raw["canvas_height"]),
        safe_insets=EdgeInsets(
            top=float(insets.get("top", 0)),
            left=float(insets.get("left", 0)),
            bottom=float(insets.get("bottom", 0)),
            right=float(insets.get("right", 0)),
        ),
    )


class DeviceCatalog:
    """Immutable lookup of device profiles by name."""

    def __init__(self, profiles: Iterable[DeviceProfile], default_name: str = DEFAULT_DEVICE_NAME) -> None:
        self._profiles: dict[str, DeviceProfile] = {p.name: p for p in profiles}
        if not self._profiles:
            raise ValueError("Device catalog needs at least one profile")
        if default_name not in self._profiles:
            default_name = next(iter(self._profiles))
        self._default_name = default_name

    @property
    def default(self) -> DeviceProfile:
        return self._profiles[self._default_name]

    def names(self) -> list[str]:
        return sorted(self._profiles.keys())

    def profiles(self) -> list[DeviceProfile]:
        return [self._profiles[n] for n in self.names()]

    def get(self, name: str | None) -> DeviceProfile:
        if not name:
            return self.default
        try:
            return self._profiles[name]
        except KeyError:
            raise KeyError(f"Unknown device: {name}") from None

    def with_profiles(self, extra: Iterable[DeviceProfile]) -> DeviceCatalog:
        merged = dict(self._profiles)
        for profile in extra:
            merged[profile.name] = profile
        return DeviceCatalog(merged.values(), default_name=self._default_name)


def default_catalog() -> DeviceCatalog:
    return DeviceCatalog(BUILTIN_DEVICES.values(), default_name=DEFAULT_DEVICE_NAME)


def list_devices() -> list[str]:
    return sorted(BUILTIN_DEVICES.keys())


def get_device(name: str | None) -> DeviceProfile:
    if not name:
        return BUILTIN_DEVICES[DEFAULT_DEVICE_NAME]
    return BUILTIN_DEVICES.get(name, BUILTIN_DEVICES[DEFAULT_DEVICE_NAME])
