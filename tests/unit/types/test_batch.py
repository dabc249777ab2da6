"""
Unit tests for batch result types.
"""

from rapid_ratelimit.types.batch import BatchResult, ProcessingFailure


class TestProcessingFailure:
    """Tests for ProcessingFailure."""

    def test_pairs_item_with_error(self):
        """The failure keeps the input item and the exact error object."""
        error = ValueError("bad recipe")
        failure = ProcessingFailure(item={"id": 7}, error=error)

        assert failure.item == {"id": 7}
        assert failure.error is error


class TestBatchResult:
    """Tests for BatchResult."""

    def test_empty_by_default(self):
        """A new result has no successes and no failures."""
        result = BatchResult()

        assert result.successful == []
        assert result.failed == []
        assert result.total == 0
        assert result.has_failures is False

    def test_instances_do_not_share_lists(self):
        """Each result gets its own lists."""
        first = BatchResult()
        second = BatchResult()
        first.successful.append(1)

        assert second.successful == []

    def test_total_and_failed_items(self):
        """total counts both lists; failed_items lists the failing inputs."""
        result = BatchResult(
            successful=["a", "c"],
            failed=[
                ProcessingFailure(item=2, error=RuntimeError("x")),
                ProcessingFailure(item=4, error=RuntimeError("y")),
            ],
        )

        assert result.total == 4
        assert result.has_failures is True
        assert result.failed_items == [2, 4]
