"""Tests for user-agent device detection."""

import pytest

from core.auth.device import detect_device
from core.auth.models import DeviceType

IPAD_SAFARI = (
    "Mozilla/5.0 (iPad; CPU OS 16_5 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/16.5 Mobile/15E148 Safari/604.1"
)
IPHONE_SAFARI = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_1 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Mobile/15E148 Safari/604.1"
)
WINDOWS_CHROME = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
WINDOWS_EDGE = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36 Edg/120.0.2210.91"
)
MAC_SAFARI = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.1 Safari/605.1.15"
)
ANDROID_PHONE = (
    "Mozilla/5.0 (Linux; Android 13; Pixel 7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Mobile Safari/537.36"
)
ANDROID_TABLET = (
    "Mozilla/5.0 (Linux; Android 12; SM-X700) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
LINUX_CHROMIUM = (
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) "
    "Chromium/119.0.0.0 Chrome/119.0.0.0 Safari/537.36"
)
LINUX_FIREFOX = "Mozilla/5.0 (X11; Linux x86_64; rv:121.0) Gecko/20100101 Firefox/121.0"
WINDOWS_7_IE = "Mozilla/5.0 (Windows NT 6.1; WOW64; Trident/7.0; rv:11.0) like Gecko"


class TestDetectDevice:
    def test_ipad_is_ios_tablet(self):
        info = detect_device(IPAD_SAFARI)

        assert info.type == DeviceType.TABLET
        assert info.operating_system == "iOS 16.5"
        assert info.browser == "Safari"
        assert info.device_name == "iOS 16.5 • Safari"

    def test_iphone_is_ios_mobile(self):
        info = detect_device(IPHONE_SAFARI)

        assert info.type == DeviceType.MOBILE
        assert info.operating_system == "iOS 17.1"

    def test_windows_10_chrome_desktop(self):
        info = detect_device(WINDOWS_CHROME)

        assert info.type == DeviceType.DESKTOP
        assert info.operating_system == "Windows 10"
        assert info.browser == "Chrome"
        assert info.device_name == "Windows 10 • Chrome"

    def test_edge_wins_over_chrome(self):
        assert detect_device(WINDOWS_EDGE).browser == "Edge"

    def test_mac_safari_reports_dotted_version(self):
        info = detect_device(MAC_SAFARI)

        assert info.operating_system == "macOS 10.15"
        assert info.browser == "Safari"

    def test_android_phone_is_mobile(self):
        info = detect_device(ANDROID_PHONE)

        assert info.type == DeviceType.MOBILE
        assert info.operating_system == "Android 13"

    def test_android_without_mobile_is_tablet(self):
        assert detect_device(ANDROID_TABLET).type == DeviceType.TABLET

    def test_chromium_is_not_reported_as_chrome_or_safari(self):
        info = detect_device(LINUX_CHROMIUM)

        assert info.operating_system == "Linux"
        assert info.browser == "unknown"

    def test_firefox(self):
        assert detect_device(LINUX_FIREFOX).browser == "Firefox"

    def test_internet_explorer_on_windows_7(self):
        info = detect_device(WINDOWS_7_IE)

        assert info.operating_system == "Windows 7"
        assert info.browser == "Internet Explorer"

    @pytest.mark.parametrize("user_agent", ["", None, "   "])
    def test_empty_agent_is_unknown(self, user_agent):
        info = detect_device(user_agent)

        assert info.type == DeviceType.UNKNOWN
        assert info.operating_system == "unknown"
        assert info.browser == "unknown"

    def test_unrecognized_agent_is_desktop_with_unknown_os(self):
        info = detect_device("curl/8.4.0")

        assert info.type == DeviceType.DESKTOP
        assert info.operating_system == "unknown"
        assert info.device_name == "unknown • unknown"
