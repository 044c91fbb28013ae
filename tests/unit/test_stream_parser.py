"""
Тесты разбора строк потокового ответа
"""
from livia.services.chat.stream_parser import parse_line, StreamLineParser
from tests.stubs import sse_line


class TestParseLine:
    def test_line_without_prefix_is_ignored(self):
        assert parse_line("") is None
        assert parse_line(": keep-alive") is None
        assert parse_line("event: message") is None
        # prefix is literal, including the space
        assert parse_line('data:{"choices":[]}') is None

    def test_valid_line(self):
        event = parse_line(sse_line("Hi"))
        assert event.is_valid
        assert event.content == "Hi"

    def test_done_line(self):
        event = parse_line("data: [DONE]")
        assert event.is_done
        assert event.data is None

    def test_malformed_json(self):
        event = parse_line("data: {not json")
        assert event is not None
        assert not event.is_valid
        assert event.error

    def test_non_object_payload(self):
        event = parse_line("data: [1, 2, 3]")
        assert not event.is_valid
        assert "list" in event.error


class TestStreamLineParser:
    def test_fragments_in_order(self):
        parser = StreamLineParser(request_id="test")
        lines = [sse_line(role="assistant"), "", sse_line("The"), sse_line(" quick"), sse_line(" fox"), "data: [DONE]"]

        fragments = [parser.feed(line) for line in lines]

        assert "".join(fragments) == "The quick fox"
        assert [f for f in fragments if f] == ["The", " quick", " fox"]

    def test_malformed_line_is_skipped(self):
        """Битая строка посередине не прерывает стрим"""
        parser = StreamLineParser()
        lines = [sse_line("The"), "data: {garbage", sse_line(" end")]

        assert "".join(parser.feed(line) for line in lines) == "The end"
        assert parser.stats()["malformed_lines"] == 1
        assert parser.stats()["fragments"] == 2

    def test_error_event_yields_nothing(self):
        parser = StreamLineParser()
        assert parser.feed('data: {"error": {"message": "rate limited"}}') == ""
        assert parser.stats()["events_seen"] == 1

    def test_finish_reason_recorded(self):
        parser = StreamLineParser()
        parser.feed('data: {"choices":[{"delta":{},"finish_reason":"stop"}]}')
        assert parser.stats()["finish_reason"] == "stop"

    def test_stats_count_lines(self):
        parser = StreamLineParser()
        for line in ["", ": ping", sse_line("a"), "data: [DONE]"]:
            parser.feed(line)

        stats = parser.stats()
        assert stats["lines_seen"] == 4
        assert stats["events_seen"] == 2
        assert stats["fragments"] == 1
