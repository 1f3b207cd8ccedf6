"""Best-effort device classification from a User-Agent header.

Each axis (device type, operating system, browser) is an ordered rule
table evaluated top to bottom against the lowercased user agent; the first
matching rule wins. Rules rely on their position: a later rule may assume
every earlier rule in the same table did not match. In particular:

- iOS is checked before macOS because iPhone and iPad agents contain
  "like Mac OS X".
- Android is checked before Linux because Android agents contain "Linux".
- Edge and Opera are checked before Chrome, and Chrome before Safari,
  because those agents also carry the "chrome/" and "safari/" tokens.
- Chrome does not match when a "chromium/" token is present.

There are no error states: an empty agent classifies as unknown on every
axis, and each table ends in an "unknown" fallback.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING

from core.auth.models import DeviceInfo, DeviceType

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

UNKNOWN = "unknown"


@dataclass(frozen=True)
class Rule:
    """Label a user agent when ``matches`` holds; ``label`` may inspect the agent for version details."""

    matches: Callable[[str], bool]
    label: Callable[[str], str]


def _contains(*tokens: str) -> Callable[[str], bool]:
    return lambda ua: any(token in ua for token in tokens)


def _contains_without(token: str, *excluded: str) -> Callable[[str], bool]:
    return lambda ua: token in ua and not any(other in ua for other in excluded)


def _fixed(label: str) -> Callable[[str], str]:
    return lambda _ua: label


def _versioned(name: str, pattern: re.Pattern[str]) -> Callable[[str], str]:
    """Append the first captured version, with underscores turned into dots, when present."""

    def label(ua: str) -> str:
        match = pattern.search(ua)
        if match is None:
            return name
        return f"{name} {match.group(1).replace('_', '.')}"

    return label


_TABLET_PATTERN = re.compile(r"(tablet|ipad|playbook|silk)|(android(?!.*mobile))")
_MOBILE_PATTERN = re.compile(r"mobile|iphone|ipod|android|blackberry|opera mini|opera mobi|webos")

DEVICE_TYPE_RULES: Sequence[tuple[Callable[[str], bool], DeviceType]] = (
    (lambda ua: _TABLET_PATTERN.search(ua) is not None, DeviceType.TABLET),
    (lambda ua: _MOBILE_PATTERN.search(ua) is not None, DeviceType.MOBILE),
    (lambda _ua: True, DeviceType.DESKTOP),
)

WINDOWS_VERSIONS: Sequence[tuple[str, str]] = (
    ("windows nt 10", "Windows 10"),
    ("windows nt 6.3", "Windows 8.1"),
    ("windows nt 6.2", "Windows 8"),
    ("windows nt 6.1", "Windows 7"),
    ("windows nt 6.0", "Windows Vista"),
    ("windows nt 5.1", "Windows XP"),
)


def _windows_label(ua: str) -> str:
    return next((label for token, label in WINDOWS_VERSIONS if token in ua), "Windows")


OS_RULES: Sequence[Rule] = (
    Rule(_contains("windows nt"), _windows_label),
    Rule(_contains("iphone", "ipad", "ipod"), _versioned("iOS", re.compile(r"os (\d+_\d+)"))),
    Rule(_contains("mac os x"), _versioned("macOS", re.compile(r"mac os x (\d+[_.]\d+)"))),
    Rule(_contains("android"), _versioned("Android", re.compile(r"android (\d+(?:\.\d+)*)"))),
    Rule(_contains("linux"), _fixed("Linux")),
)

BROWSER_RULES: Sequence[Rule] = (
    Rule(_contains("firefox/"), _fixed("Firefox")),
    Rule(_contains("edg/", "edge/"), _fixed("Edge")),
    Rule(_contains("opr/", "opera/"), _fixed("Opera")),
    Rule(_contains_without("chrome/", "chromium/"), _fixed("Chrome")),
    Rule(_contains_without("safari/", "chrome/", "chromium/"), _fixed("Safari")),
    Rule(_contains("msie ", "trident/"), _fixed("Internet Explorer")),
)


def _first_label(rules: Sequence[Rule], ua: str) -> str:
    return next((rule.label(ua) for rule in rules if rule.matches(ua)), UNKNOWN)


def classify_device_type(ua: str) -> DeviceType:
    """Classify an already-lowercased user agent as tablet, mobile, or desktop."""
    if not ua:
        return DeviceType.UNKNOWN
    return next(device_type for matches, device_type in DEVICE_TYPE_RULES if matches(ua))


def classify_os(ua: str) -> str:
    return _first_label(OS_RULES, ua)


def classify_browser(ua: str) -> str:
    return _first_label(BROWSER_RULES, ua)


def detect_device(user_agent: str | None) -> DeviceInfo:
    """Build the device descriptor stored on a session."""
    ua = (user_agent or "").strip().lower()
    operating_system = classify_os(ua)
    browser = classify_browser(ua)
    return DeviceInfo(
        type=classify_device_type(ua),
        operating_system=operating_system,
        browser=browser,
        device_name=f"{operating_system} • {browser}",
    )
