"""Fixed-window, per-client-IP rate limiting (app-wide and on the auth routes)."""

import ipaddress
import logging
import threading
import time
from collections.abc import Callable, Iterable, Mapping

from fastapi import HTTPException, Request, status

logger = logging.getLogger(__name__)

Network = ipaddress.IPv4Network | ipaddress.IPv6Network


def _parse_ip(value: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    try:
        return ipaddress.ip_address(value.strip())
    except ValueError:
        return None


def _is_trusted(ip: str, trusted: Iterable[Network]) -> bool:
    addr = _parse_ip(ip)
    if addr is None:
        return False
    return any(addr in net for net in trusted)


def client_ip_from_headers(peer_ip: str, headers: Mapping[str, str], trusted: Iterable[Network]) -> str:
    """
    Resolve the client address behind a chain of trusted proxies.

    X-Forwarded-For is only read when the socket peer is itself a trusted proxy. The
    chain is walked right to left, skipping trusted hops; the first untrusted address
    is the client. A peer outside the trusted set is always the client.
    """
    trusted = list(trusted)
    if not trusted or not _is_trusted(peer_ip, trusted):
        return peer_ip
    forwarded = headers.get("x-forwarded-for") or ""
    for hop in reversed([h.strip() for h in forwarded.split(",") if h.strip()]):
        if _parse_ip(hop) is None:
            break
        if not _is_trusted(hop, trusted):
            return hop
    return peer_ip


def get_client_ip(request: Request, trusted: Iterable[Network] = ()) -> str:
    peer_ip = request.client.host if request.client else "unknown"
    return client_ip_from_headers(peer_ip, request.headers, trusted)


class FixedWindowRateLimiter:
    """In-process store of key -> (count, window_start). Not shared across workers."""

    def __init__(
        self,
        limit: int,
        window_seconds: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._windows: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()

    def hit(self, key: str) -> float | None:
        """
        Count one request for key. Returns None when allowed, otherwise the number of
        seconds until the current window resets.
        """
        now = self._clock()
        with self._lock:
            count, start = self._windows.get(key, (0, now))
            if now - start >= self.window_seconds:
                count, start = 0, now
            if count >= self.limit:
                return self.window_seconds - (now - start)
            self._windows[key] = (count + 1, start)
            self._evict(now)
            return None

    def _evict(self, now: float) -> None:
        if len(self._windows) < 10000:
            return
        expired = [k for k, (_, start) in self._windows.items() if now - start >= self.window_seconds]
        for k in expired:
            del self._windows[k]

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


class RateLimit:
    """
    FastAPI dependency enforcing the app's limiter for `scope` per client IP.

    Limiters live on app.state.rate_limiters (built by create_app); a scope with no
    limiter there is not limited.
    """

    def __init__(self, scope: str) -> None:
        self.scope = scope

    def __call__(self, request: Request) -> None:
        limiter: FixedWindowRateLimiter | None = request.app.state.rate_limiters.get(self.scope)
        if limiter is None:
            return
        client_ip = get_client_ip(request, request.app.state.settings.trusted_proxy_networks)
        retry_after = limiter.hit(f"{self.scope}:{client_ip}")
        if retry_after is not None:
            logger.warning("Rate limit exceeded", extra={"scope": self.scope, "client_ip": client_ip})
            raise HTTPException(
                status_code=status.HTTP_429_TOO_MANY_REQUESTS,
                detail="Too many requests, please try again later.",
                headers={"Retry-After": str(max(1, int(retry_after)))},
            )
