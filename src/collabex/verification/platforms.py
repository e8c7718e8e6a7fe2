"""Social-platform profile URL matcher.

Verification is format-only: the URL must match the platform's profile
pattern and name a real-looking account rather than a system page. Platforms
throttle automated fetches, so existence checks are opt-in (see
``collabex.verification.service``).
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urlparse


@dataclass(frozen=True)
class PlatformConfig:
    pattern: re.Pattern[str]
    build_profile_url: Callable[[str], str]

    def extract_handle(self, url: str) -> str | None:
        match = self.pattern.search(url)
        return match.group(1) if match else None


@dataclass(frozen=True)
class VerificationResult:
    valid: bool
    display_name: str | None = None
    error: str | None = None
    profile_url: str | None = None


def _strip_at(handle: str) -> str:
    return handle.replace("@", "", 1)


_TWITTER = PlatformConfig(
    pattern=re.compile(r"(?:twitter\.com|x\.com)/([a-zA-Z0-9_]+)"),
    build_profile_url=lambda h: f"https://x.com/{_strip_at(h)}",
)

PLATFORMS: dict[str, PlatformConfig] = {
    "instagram": PlatformConfig(
        pattern=re.compile(r"(?:instagram\.com|instagr\.am)/([a-zA-Z0-9_.]+)"),
        build_profile_url=lambda h: f"https://www.instagram.com/{h}/",
    ),
    "tiktok": PlatformConfig(
        pattern=re.compile(r"tiktok\.com/@([a-zA-Z0-9_.]+)"),
        build_profile_url=lambda h: f"https://www.tiktok.com/@{_strip_at(h)}",
    ),
    "youtube": PlatformConfig(
        pattern=re.compile(r"youtube\.com/(?:@|channel/|c/|user/)([a-zA-Z0-9_-]+)"),
        build_profile_url=lambda h: f"https://www.youtube.com/@{_strip_at(h)}",
    ),
    "twitter": _TWITTER,
    "x": _TWITTER,
    "linkedin": PlatformConfig(
        pattern=re.compile(r"linkedin\.com/in/([a-zA-Z0-9_-]+)"),
        build_profile_url=lambda h: f"https://www.linkedin.com/in/{h}",
    ),
    "facebook": PlatformConfig(
        pattern=re.compile(r"facebook\.com/([a-zA-Z0-9_.]+)"),
        build_profile_url=lambda h: f"https://www.facebook.com/{h}",
    ),
    "twitch": PlatformConfig(
        pattern=re.compile(r"twitch\.tv/([a-zA-Z0-9_]+)"),
        build_profile_url=lambda h: f"https://www.twitch.tv/{h}",
    ),
    "pinterest": PlatformConfig(
        pattern=re.compile(r"pinterest\.com/([a-zA-Z0-9_]+)"),
        build_profile_url=lambda h: f"https://www.pinterest.com/{h}",
    ),
}

# Path segments that are platform pages, not accounts
BLOCKLIST = re.compile(
    r"^(login|signin|signup|register|admin|settings|explore|reels|stories|about|help|support|privacy|terms)$",
    re.IGNORECASE,
)

MISSING_URL_OR_HANDLE = "Please provide a valid profile URL or handle"


def validate_url_format(url: str, platform_key: str) -> str | None:
    """Return an error message, or None if ``url`` is a plausible profile URL."""
    config = PLATFORMS.get(platform_key)
    if config is None:
        parsed = urlparse(url)
        if not parsed.scheme or not parsed.netloc:
            return "Invalid URL format"
        return None

    if not config.pattern.search(url):
        return f"Invalid {platform_key} URL format. Please provide a valid profile URL."

    handle = config.extract_handle(url)
    if not handle:
        return "Could not extract username from URL"
    if BLOCKLIST.match(handle):
        return "This appears to be a system page, not a user profile"
    return None


def verify(platform_name: str, handle: str, url: str) -> VerificationResult:
    """Check a claimed account by URL, or by handle when no URL is given."""
    platform_key = platform_name.lower()
    config = PLATFORMS.get(platform_key)

    if not url:
        if config is None or not handle:
            return VerificationResult(valid=False, error=MISSING_URL_OR_HANDLE)
        url = config.build_profile_url(_strip_at(handle))

    error = validate_url_format(url, platform_key)
    if error:
        return VerificationResult(valid=False, error=error)

    display_name = handle or (config.extract_handle(url) if config else None)
    return VerificationResult(valid=True, display_name=display_name or None, profile_url=url)
