from unittest.mock import Mock
from boothforge.tasker.idle import IdleQueue


def test_run_pending_executes_in_order():
    queue = IdleQueue()
    calls = []
    queue.add(calls.append, 1)
    queue.add(lambda value=None: calls.append(value), value=2)

    assert queue.run_pending() == 2
    assert calls == [1, 2]
    assert queue.run_pending() == 0


def test_failing_callback_does_not_stop_the_queue():
    queue = IdleQueue()
    after = Mock()
    queue.add(Mock(side_effect=RuntimeError("nope")))
    queue.add(after)

    assert queue.run_pending() == 2
    after.assert_called_once_with()
