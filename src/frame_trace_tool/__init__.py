"""
Frame Trace Tool Package
"""

from .models import (
    EnteredFrameEvent, ExitedFrameEvent, Frame, FunctionRecord,
    TraceError, MalformedEventError, TraceFinishedError,
)
from .events import EventEmitter
from .aggregator import FunctionAggregator
from .call_stack_builder import FrameTreeBuilder
from .trace import Trace
from .parser import parse_trace, load_trace, save_trace, load_event_log, record_trace_events, ReplaySource
from .bounds import TraceBounds
from .utils.search import binary_search, find_first_visible, iter_visible_frames

__all__ = [
    'EnteredFrameEvent',
    'ExitedFrameEvent',
    'Frame',
    'FunctionRecord',
    'TraceError',
    'MalformedEventError',
    'TraceFinishedError',
    'EventEmitter',
    'FunctionAggregator',
    'FrameTreeBuilder',
    'Trace',
    'parse_trace',
    'load_trace',
    'save_trace',
    'load_event_log',
    'record_trace_events',
    'ReplaySource',
    'TraceBounds',
    'binary_search',
    'find_first_visible',
    'iter_visible_frames',
]
