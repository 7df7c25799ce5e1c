"""
Main Logo processor interface.
This is the primary entry point for turning Logo scripts into OpenSCAD.
"""
import logging
from typing import Any, Dict, List, Optional, Tuple

from turtlescad.codegen.openscad import EMPTY_OUTPUT, OpenScadGenerator
from turtlescad.config.settings import ConfigManager, ProcessorConfig
from turtlescad.core.geometry import Marker, Polygon, Segment
from turtlescad.core.interpreter import ExecuteResult, LogoInterpreter
from turtlescad.core.parser import LogoParser, ParseResult
from turtlescad.utils.errors import ErrorCollector, LogoDiagnostic, LogoRuntimeError

logger = logging.getLogger(__name__)


class LogoProcessor:
    """
    Main interface for Logo processing.
    Provides a simple API for editors and preview tools.
    """

    def __init__(self, config: Optional[ProcessorConfig] = None):
        self.config = config or ConfigManager.default()
        ConfigManager.validate(self.config)

        self.error_collector = ErrorCollector()
        self.interpreter = LogoInterpreter(
            fn=self.config.arc_resolution_default,
            max_call_depth=self.config.max_call_depth,
            max_steps=self.config.max_steps,
        )
        self.generator = OpenScadGenerator(
            indent_spaces=self.config.indent_spaces,
            prefer_circle_primitives=self.config.prefer_circle_primitives,
        )

        self.parse_result: Optional[ParseResult] = None
        self.execute_result = ExecuteResult()
        self._openscad = EMPTY_OUTPUT
        self._last_processed_text = ""
        self._processing_successful = False

    def process_logo(self, logo_text: str) -> bool:
        """
        Parse, execute and generate OpenSCAD for a script.

        Parse diagnostics do not stop execution of the commands that did
        parse. A runtime error discards the run's geometry and becomes a
        single diagnostic.

        Args:
            logo_text: Raw script text

        Returns:
            True if processing finished without error diagnostics
        """
        self.error_collector.clear()
        self._last_processed_text = logo_text

        self.parse_result = LogoParser(self.error_collector).parse(logo_text)
        try:
            self.execute_result = self.interpreter.execute(
                self.parse_result.commands, self.parse_result.comments
            )
        except LogoRuntimeError as e:
            logger.warning("Runtime error: %s", e)
            self.interpreter.reset()
            self.execute_result = ExecuteResult()
            self._add_runtime_diagnostic(e, logo_text)

        self._openscad = self.generator.generate(self.execute_result.polygons)
        self._processing_successful = not self.error_collector.has_errors()

        if self._processing_successful:
            logger.info("Processed script: %d segments, %d polygons, %d markers",
                        len(self.execute_result.segments), len(self.execute_result.polygons),
                        len(self.execute_result.markers))
        else:
            logger.info("Processing failed with %d errors", len(self.error_collector.errors))
        return self._processing_successful

    def validate_syntax(self, logo_text: str) -> bool:
        """
        Validate script syntax without execution.
        Useful for real-time editor feedback.
        """
        result = LogoParser(ErrorCollector()).parse(logo_text)
        return not result.diagnostics

    def _add_runtime_diagnostic(self, error: LogoRuntimeError, logo_text: str):
        """Record a runtime error over the whole line it happened on."""
        line_number = error.line_number or 1
        lines = logo_text.split('\n')
        line_text = lines[line_number - 1] if line_number <= len(lines) else ''
        self.error_collector.add_line_error(line_number, line_text, error.message)

    # Error handling methods for editor integration

    def get_errors_for_line(self, line_number: int) -> List[LogoDiagnostic]:
        return self.error_collector.get_errors_for_line(line_number)

    def get_all_errors(self) -> List[LogoDiagnostic]:
        return self.error_collector.get_all_errors()

    def has_errors(self) -> bool:
        return self.error_collector.has_errors()

    def has_fatal_errors(self) -> bool:
        """Check if the last run was aborted by a runtime error."""
        return self.error_collector.has_fatal_errors()

    # Geometry access methods for preview integration

    def get_openscad(self) -> str:
        """Get the OpenSCAD source generated by the last run."""
        return self._openscad

    def get_polygons(self) -> List[Polygon]:
        return self.execute_result.polygons

    def get_markers(self) -> List[Marker]:
        return self.execute_result.markers

    def get_all_geometry(self) -> List[Segment]:
        return self.execute_result.segments

    def get_geometry_for_line(self, line_number: int) -> List[Segment]:
        """Get all segments traced by a specific line number."""
        return [seg for seg in self.execute_result.segments if seg.line_number == line_number]

    def get_line_for_segment(self, segment_id: int) -> Optional[int]:
        """Get the source line that traced a segment."""
        for segment in self.execute_result.segments:
            if segment.segment_id == segment_id:
                return segment.line_number
        return None

    def get_bounding_box(self) -> Tuple[List[float], List[float]]:
        """
        Get the bounding box of all segments and markers.

        Returns:
            Tuple of (min_point, max_point) as [x, y] lists
        """
        min_point, max_point = self.interpreter.geometry_manager.get_bounding_box()
        return min_point.to_list(), max_point.to_list()

    def get_statistics(self) -> Dict[str, Any]:
        """Get processing and geometry statistics."""
        return {
            'processing': {
                'total_lines': len(self._last_processed_text.split('\n')),
                'commands': len(self.parse_result.commands) if self.parse_result else 0,
                'comments': len(self.parse_result.comments) if self.parse_result else 0,
                'errors': len(self.error_collector.errors),
            },
            'geometry': self.interpreter.geometry_manager.get_statistics(),
        }

    def get_summary(self) -> str:
        """One-line description of the last run."""
        return (f"{len(self.execute_result.segments)} segments, "
                f"{len([p for p in self.execute_result.polygons if not p.comment_only])} polygons, "
                f"{len(self.execute_result.markers)} markers")

    def was_processing_successful(self) -> bool:
        return self._processing_successful

    def get_last_processed_text(self) -> str:
        return self._last_processed_text

    def reset(self):
        """Reset processor state."""
        self.error_collector.clear()
        self.parse_result = None
        self.execute_result = ExecuteResult()
        self._openscad = EMPTY_OUTPUT
        self._last_processed_text = ""
        self._processing_successful = False
