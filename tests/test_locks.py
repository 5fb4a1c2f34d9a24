"""Tests for the per-signer lock."""

import asyncio

import pytest

from ethconvert.errors import LockTimeoutError
from ethconvert.utils.locks import SignerLock, get_signer_lock

SIGNER = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"


class TestSignerLocks:
    """Tests for the concurrency locks module."""

    @pytest.mark.asyncio
    async def test_same_signer_same_lock(self):
        lock1 = await get_signer_lock(SIGNER)
        lock2 = await get_signer_lock(SIGNER)

        assert lock1 is lock2

    @pytest.mark.asyncio
    async def test_different_signers_different_locks(self):
        lock1 = await get_signer_lock(SIGNER)
        lock2 = await get_signer_lock("0x0000000000000000000000000000000000000001")

        assert lock1 is not lock2

    @pytest.mark.asyncio
    async def test_context_manager_releases(self):
        async with SignerLock(SIGNER, operation="test"):
            lock = await get_signer_lock(SIGNER)
            assert lock.locked()

        assert not lock.locked()

    @pytest.mark.asyncio
    async def test_releases_on_error(self):
        with pytest.raises(RuntimeError):
            async with SignerLock(SIGNER):
                raise RuntimeError("boom")

        lock = await get_signer_lock(SIGNER)
        assert not lock.locked()

    @pytest.mark.asyncio
    async def test_prevents_concurrent_access(self):
        results = []

        async def task(name):
            async with SignerLock(SIGNER, timeout=10.0, operation=f"task_{name}"):
                results.append(f"{name}_start")
                await asyncio.sleep(0.05)
                results.append(f"{name}_end")

        await asyncio.gather(task("A"), task("B"))

        assert results in [
            ["A_start", "A_end", "B_start", "B_end"],
            ["B_start", "B_end", "A_start", "A_end"],
        ]

    @pytest.mark.asyncio
    async def test_timeout(self):
        async with SignerLock(SIGNER):
            with pytest.raises(LockTimeoutError) as exc_info:
                async with SignerLock(SIGNER, timeout=0.05):
                    pass

        assert exc_info.value.status_code == 503
