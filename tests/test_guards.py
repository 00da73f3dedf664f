import pytest

from tixly.errors import ReentrancyError
from tixly.services.guards import ReentrancyGuard


class TestReentrancyGuard:
    def test_nested_entry_is_refused(self):
        guard = ReentrancyGuard()
        with guard:
            assert guard.entered
            with pytest.raises(ReentrancyError, match="Reentrant call"):
                with guard:
                    pass
            # The refused entry leaves the outer hold intact
            assert guard.entered
        assert not guard.entered

    def test_released_when_body_raises(self):
        guard = ReentrancyGuard()
        with pytest.raises(RuntimeError):
            with guard:
                raise RuntimeError("boom")
        assert not guard.entered

        with guard:
            assert guard.entered
