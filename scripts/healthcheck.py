"""
Reachability check for the configured reporting backend.
"""

from __future__ import annotations

import os
import sys
from urllib.error import HTTPError, URLError
from urllib.request import urlopen

from agent_reports.config import get_reporting_api_settings


def main() -> int:
    base_url = get_reporting_api_settings().base_url
    path = os.getenv("HEALTHCHECK_PATH", "/")
    url = f"{base_url}{path}"

    try:
        with urlopen(url, timeout=5) as response:
            return 0 if 200 <= response.status < 400 else 1
    except HTTPError as exc:
        # Any HTTP answer means the backend is up.
        print(f"{url} answered {exc.code}", file=sys.stderr)
        return 0 if exc.code < 500 else 1
    except (URLError, TimeoutError, ValueError) as exc:
        print(f"{url} unreachable: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
