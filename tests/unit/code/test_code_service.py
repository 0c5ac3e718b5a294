"""Tests for unique code reservation."""

import pytest

from agora.core.core import Core
from agora.core.modules.code import service as code_service
from agora.core.modules.store.memory import MemorySessionStore
from agora.errors import ExhaustedRetriesError


class TakenCodesStore(MemorySessionStore):
    """Store that reports a fixed set of codes as taken and counts lookups."""

    def __init__(self, taken: set[str] | None = None, all_taken: bool = False) -> None:
        super().__init__()
        self.taken = taken or set()
        self.all_taken = all_taken
        self.lookups: list[str] = []

    async def code_exists(self, code: str) -> bool:
        self.lookups.append(code)
        return self.all_taken or code in self.taken


@pytest.fixture
def candidates(monkeypatch):
    """Make generate_code return a predictable sequence of candidates."""
    sequence = [f"CODE{n:02d}" for n in range(1, 30)]
    iterator = iter(sequence)
    monkeypatch.setattr(code_service, "generate_code", lambda length: next(iterator))
    return sequence


class TestReserveUniqueCode:
    """Tests for CodeService.reserve_unique_code."""

    @pytest.mark.asyncio
    async def test_first_free_candidate_is_returned(self, config, candidates):
        """Test that the first candidate is accepted when it is free."""
        store = TakenCodesStore()
        core = Core(config, store)

        code = await core.services.code.reserve_unique_code()

        assert code == candidates[0]
        assert store.lookups == [candidates[0]]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("n", [2, 4, 10])
    async def test_nth_candidate_after_collisions(self, config, candidates, n):
        """Test that after N-1 taken candidates the Nth is returned with exactly N lookups."""
        store = TakenCodesStore(taken=set(candidates[: n - 1]))
        core = Core(config, store)

        code = await core.services.code.reserve_unique_code()

        assert code == candidates[n - 1]
        assert len(store.lookups) == n

    @pytest.mark.asyncio
    async def test_exhausted_after_ten_lookups(self, config, candidates):
        """Test that ExhaustedRetriesError is raised after exactly ten lookups."""
        store = TakenCodesStore(all_taken=True)
        core = Core(config, store)

        with pytest.raises(ExhaustedRetriesError):
            await core.services.code.reserve_unique_code()

        assert len(store.lookups) == 10

    @pytest.mark.asyncio
    async def test_length_defaults_to_config(self, core):
        """Test that real codes use the configured length."""
        code = await core.services.code.reserve_unique_code()
        assert len(code) == core.config.code_length

    @pytest.mark.asyncio
    async def test_explicit_length(self, core):
        """Test that an explicit length overrides the configured one."""
        assert len(await core.services.code.reserve_unique_code(8)) == 8
