import sys
import unittest
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from career_pulse.ai.credentials import CredentialCache  # noqa: E402
from career_pulse.core.errors import AuthenticationError  # noqa: E402
from tests.fakes import FakeCredentialProvider  # noqa: E402


class FakeClock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class CredentialCacheTests(unittest.IsolatedAsyncioTestCase):
    async def test_token_is_reused_until_expiry(self):
        clock = FakeClock()
        provider = FakeCredentialProvider()
        cache = CredentialCache(provider, clock=clock)

        self.assertEqual(await cache.get(), "token-1")
        clock.now += 54 * 60
        self.assertEqual(await cache.get(), "token-1")
        self.assertEqual(provider.calls, 1)

        clock.now += 2 * 60
        self.assertEqual(await cache.get(), "token-2")
        self.assertEqual(provider.calls, 2)

    async def test_provider_expiry_minus_skew_caps_lifetime(self):
        clock = FakeClock()
        provider = FakeCredentialProvider(expires_at=clock.now + 10 * 60)
        cache = CredentialCache(provider, clock=clock)

        await cache.get()

        self.assertEqual(cache.expires_at, clock.now + 5 * 60)

    async def test_invalidate_forces_refresh(self):
        provider = FakeCredentialProvider()
        cache = CredentialCache(provider, clock=FakeClock())

        await cache.get()
        cache.invalidate()

        self.assertEqual(await cache.get(), "token-2")

    async def test_provider_failure_becomes_authentication_error(self):
        cache = CredentialCache(FakeCredentialProvider(error=OSError("metadata server unreachable")), clock=FakeClock())

        with self.assertRaises(AuthenticationError):
            await cache.get()
        self.assertFalse(cache.is_valid())


if __name__ == "__main__":
    unittest.main()
