import json
import logging
import queue

from studio_data.core.logging.builder import NonBlockingQueueHandler, setup_logging, stop_queue_logging
from studio_data.core.logging.filters import correlation_scope

from ..test_fixtures.settings_fixtures import make_test_settings


def test_queue_listener_writes_file(tmp_path, restore_logging):
    stop_queue_logging()
    settings = make_test_settings(
        LOG_LEVEL="DEBUG", LOG_FORMAT="json", LOG_TO_STDOUT=False, LOG_DIR=tmp_path, LOG_USE_QUEUE=True
    )

    setup_logging(settings)

    logger = logging.getLogger("studio_data.test.queue")
    with correlation_scope("test-req-1"):
        for i in range(10):
            logger.info("test message %d", i, extra={"iteration": i})

    # stop() drains the queue before returning
    stop_queue_logging()

    log_file = tmp_path / "studio-data.log"
    assert log_file.exists()
    lines = [json.loads(line) for line in log_file.read_text().splitlines() if line.strip()]
    ours = [line for line in lines if line["logger"] == "studio_data.test.queue"]

    assert [line["message"] for line in ours] == [f"test message {i}" for i in range(10)]
    assert all(line["correlation_id"] == "test-req-1" for line in ours)
    assert ours[3]["iteration"] == 3


def test_bounded_queue_drops_instead_of_blocking():
    log_queue: queue.Queue = queue.Queue(2)
    handler = NonBlockingQueueHandler(log_queue)

    for i in range(5):
        handler.handle(logging.LogRecord("studio_data.test", logging.INFO, __file__, 1, f"msg {i}", None, None))

    assert log_queue.qsize() == 2
    assert handler.dropped == 3
