import pytest

from turtlescad.config.settings import MAX_CALL_DEPTH_LIMIT, ProcessorConfig
from turtlescad.logo_processor import LogoProcessor
from turtlescad.utils.errors import ErrorSeverity, ErrorType


@pytest.fixture
def processor():
    return LogoProcessor()


class TestLogoProcessor:
    def test_simple_line(self, processor) -> None:
        assert processor.process_logo("FD 10")
        assert processor.get_openscad() == "polygon(points=[\n  [0, 0],\n  [0, 10],\n  [0, 0]\n]);"
        assert processor.was_processing_successful()
        assert not processor.has_errors()
        assert processor.get_last_processed_text() == "FD 10"

    def test_empty_script(self, processor) -> None:
        assert processor.process_logo("")
        assert processor.get_openscad() == "// No polygons"

    def test_parse_errors_do_not_stop_execution(self, processor) -> None:
        assert not processor.process_logo("FD 10\nBOGUS\nRT 90\nFD 10")
        errors = processor.get_all_errors()
        assert len(errors) == 1
        assert errors[0].line_number == 2
        assert errors[0].error_type == ErrorType.SEMANTIC
        assert "[10, 10]" in processor.get_openscad()
        assert not processor.has_fatal_errors()

    def test_runtime_error_discards_geometry(self, processor) -> None:
        assert not processor.process_logo("FD 10\nFD :missing")
        errors = processor.get_all_errors()
        assert len(errors) == 1

        error = errors[0]
        assert error.message == "Undefined variable: missing"
        assert error.error_type == ErrorType.RUNTIME
        assert error.severity == ErrorSeverity.FATAL
        assert (error.line_number, error.char_start, error.char_end) == (2, 1, 12)

        assert processor.has_fatal_errors()
        assert processor.get_openscad() == "// No polygons"
        assert processor.get_polygons() == []
        assert processor.get_all_geometry() == []
        assert processor.get_statistics()['geometry']['total_segments'] == 0

    def test_runtime_error_inside_repeat_body(self, processor) -> None:
        processor.process_logo("REPEAT 2 [\n  FD :oops\n]")
        assert [e.line_number for e in processor.get_errors_for_line(2)] == [2]

    def test_invalid_resolution(self, processor) -> None:
        assert not processor.process_logo("EXTSETFN 0")
        assert "at least 1" in processor.get_all_errors()[0].message

    def test_errors_cleared_between_runs(self, processor) -> None:
        processor.process_logo("BOGUS")
        assert processor.process_logo("FD 1")
        assert processor.get_all_errors() == []

    def test_validate_syntax(self, processor) -> None:
        assert processor.validate_syntax("FD 10\nRT 90")
        assert not processor.validate_syntax("FD")
        assert processor.get_all_errors() == []

    def test_line_mapping(self, processor) -> None:
        processor.process_logo("FD 10\nRT 90\nREPEAT 2 [FD 1]")
        assert len(processor.get_geometry_for_line(1)) == 1
        assert processor.get_geometry_for_line(2) == []
        assert len(processor.get_geometry_for_line(3)) == 2
        assert processor.get_line_for_segment(0) == 1
        assert processor.get_line_for_segment(2) == 3
        assert processor.get_line_for_segment(99) is None

    def test_bounding_box_includes_markers(self, processor) -> None:
        processor.process_logo("SETXY -5, 3\nEXTMARKER [m], 10, 20")
        assert processor.get_bounding_box() == ([-5, 0], [10, 20])
        assert len(processor.get_markers()) == 1

    def test_statistics(self, processor) -> None:
        processor.process_logo("# lines\nFD 10\nPU\nFD 5\nARC 90, 10")
        stats = processor.get_statistics()
        assert stats['processing']['commands'] == 4
        assert stats['processing']['comments'] == 1
        assert stats['processing']['errors'] == 0

        geometry = stats['geometry']
        assert geometry['total_segments'] == 12
        assert geometry['pen_down_segments'] == 1
        assert geometry['pen_up_segments'] == 11
        assert geometry['arc_segments'] == 10
        assert geometry['arc_groups'] == 1
        assert geometry['pen_down_length'] == pytest.approx(10)

    def test_summary(self, processor) -> None:
        processor.process_logo("FD 10\nEXTMARKER")
        assert processor.get_summary() == "1 segments, 1 polygons, 1 markers"

    def test_config_is_applied(self) -> None:
        processor = LogoProcessor(ProcessorConfig(indent_spaces=0, prefer_circle_primitives=False))
        processor.process_logo("FD 1")
        assert "\n[0, 1],\n" in processor.get_openscad()

    def test_guards_from_config(self) -> None:
        processor = LogoProcessor(ProcessorConfig(max_steps=10))
        assert not processor.process_logo("REPEAT 20 [FD 1]")
        assert "Maximum of 10" in processor.get_all_errors()[0].message

    def test_recursive_list_at_the_largest_depth(self) -> None:
        processor = LogoProcessor(ProcessorConfig(max_call_depth=MAX_CALL_DEPTH_LIMIT))
        assert not processor.process_logo('MAKE "loop [FD 1; :loop]\n:loop')
        error = processor.get_all_errors()[0]
        assert error.error_type == ErrorType.RUNTIME
        assert error.message.startswith("Maximum call depth")
        assert error.line_number == 2

    def test_block_opener_in_a_line_comment(self, processor) -> None:
        assert processor.process_logo("FD 10 // see /* note\nRT 90\nFD 20")
        assert "[20, 10]" in processor.get_openscad()

    def test_invalid_config_is_rejected(self) -> None:
        with pytest.raises(ValueError):
            LogoProcessor(ProcessorConfig(indent_spaces=-1))

    def test_reset(self, processor) -> None:
        processor.process_logo("BOGUS\nFD 10")
        processor.reset()
        assert processor.get_openscad() == "// No polygons"
        assert processor.get_all_errors() == []
        assert processor.get_all_geometry() == []
        assert processor.get_last_processed_text() == ""
