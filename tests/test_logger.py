import logging

from logger import ChatLogger


def test_writes_to_log_file(tmp_path):
    chat_logger = ChatLogger(name="unit", log_dir=tmp_path)
    chat_logger.log_message_sent("127.0.0.1:8888", "hello")
    chat_logger.close()

    with open(chat_logger.log_path, encoding="utf-8") as f:
        text = f.read()
    assert "CHAT OUT | To: 127.0.0.1:8888 | Message: hello" in text
    assert "Session Ended - unit" in text


def test_same_name_reuses_one_logger(tmp_path):
    first = ChatLogger(name="reused", log_dir=tmp_path)
    known = len(logging.Logger.manager.loggerDict)
    second = ChatLogger(name="reused", log_dir=tmp_path)

    assert second.logger is first.logger
    assert len(logging.Logger.manager.loggerDict) == known
    # the newer instance replaced the older one's handler
    assert second.logger.handlers == [second._handler]

    second.close()
    assert second.logger.handlers == []


def test_close_is_idempotent(tmp_path):
    chat_logger = ChatLogger(name="twice", log_dir=tmp_path)
    chat_logger.close()
    chat_logger.close()
    assert chat_logger.logger.handlers == []
