from unittest.mock import patch

import pytest

from omnibrief.processor.deadline import Deadline
from omnibrief.processor.exceptions import PipelineTimeoutError


class TestDeadline:
    def test_remaining_counts_down(self) -> None:
        with patch("omnibrief.processor.deadline.time.monotonic", side_effect=[100.0, 130.0]):
            deadline = Deadline.after(60)
            assert deadline.remaining() == pytest.approx(30.0)

    def test_remaining_never_negative(self) -> None:
        assert Deadline(expires_at=0.0).remaining() == 0.0

    def test_check_passes_before_expiry(self) -> None:
        Deadline.after(60).check("summarization")

    def test_check_raises_after_expiry(self) -> None:
        deadline = Deadline(expires_at=0.0)
        assert deadline.expired()
        with pytest.raises(PipelineTimeoutError, match="before summarization"):
            deadline.check("summarization")
