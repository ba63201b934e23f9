from __future__ import annotations

from typing import Optional
from urllib.parse import unquote, urlparse
import unicodedata


def normalize_linkedin_profile_url(url: Optional[str]) -> Optional[str]:
    """Canonicalize a LinkedIn profile URL to ``https://linkedin.com/in/{slug}``.

    Returns None for anything that is not a LinkedIn ``/in/`` profile.
    """
    if not url:
        return None
    text = url.strip()
    if not text.startswith("http://") and not text.startswith("https://"):
        text = f"https://{text}"
    u = urlparse(text)
    host = (u.netloc or '').lower().replace('www.', '')
    if host.endswith('.linkedin.com'):
        host = 'linkedin.com'
    path = (u.path or '').rstrip('/')
    if host != 'linkedin.com' or not path.startswith('/in/'):
        return None
    # Keep only /in/{slug} and drop trailing locale/segments (e.g., /de, /en)
    parts = [p for p in path.split('/') if p]
    if len(parts) < 2:
        return None
    slug = unicodedata.normalize('NFKC', unquote(parts[1])).strip().lower()
    # Remove invisible characters occasionally present
    slug = slug.replace('\u200b', '').replace('\u200c', '').replace('\u200d', '')
    return f"https://linkedin.com/in/{slug}"
