"""
Trace 生命周期、观察者和错误处理测试
"""

import unittest

from frame_trace_tool.events import EventEmitter, ENTERED_FRAME, EXITED_FRAME, FINISHED
from frame_trace_tool.models import (
    EnteredFrameEvent, ExitedFrameEvent, MalformedEventError, TraceFinishedError,
)
from frame_trace_tool.trace import Trace
from frame_trace_tool.utils.tree_utils import get_call_stack, get_tree_statistics, format_call_stack_tree


class TestTraceLifecycle(unittest.TestCase):
    """测试追踪生命周期"""

    def test_bare_exit_finishes_trace(self):
        trace = Trace()
        finished = []
        trace.on(FINISHED, finished.append)

        self.assertIsNone(trace.on_exited_frame({'time': 0}))
        self.assertTrue(trace.finished)
        self.assertEqual(len(trace.frames), 0)
        self.assertEqual(finished, [trace])

    def test_events_after_finish_are_rejected(self):
        trace = Trace()
        trace.on_exited_frame({'time': 0})
        with self.assertRaises(TraceFinishedError):
            trace.on_entered_frame({'name': 'f', 'time': 1})
        with self.assertRaises(TraceFinishedError):
            trace.on_exited_frame({'time': 2})
        self.assertEqual(len(trace.frames), 0)

    def test_extra_exit_after_frames(self):
        trace = Trace()
        trace.on_entered_frame({'name': 'f', 'time': 0})
        trace.on_exited_frame({'time': 4})
        trace.on_exited_frame({'time': 6})
        self.assertTrue(trace.finished)
        self.assertEqual(len(trace.frames), 1)
        self.assertEqual(trace.end_time, 4)

    def test_finish_is_idempotent(self):
        trace = Trace()
        finished = []
        trace.on(FINISHED, finished.append)
        trace.finish()
        trace.finish()
        self.assertEqual(len(finished), 1)

    def test_finish_with_open_frames(self):
        trace = Trace()
        trace.on_entered_frame({'name': 'f', 'time': 0})
        self.assertEqual(len(trace.open_frames), 1)
        trace.finish()
        self.assertEqual(trace.open_frames, [])
        self.assertIsNone(trace.frames[0].end_time)

    def test_empty_trace(self):
        trace = Trace()
        self.assertEqual(trace.total_time, 0)
        self.assertEqual(trace.to_dict(), {'functions': [], 'children': []})


class TestMalformedEvents(unittest.TestCase):
    """测试事件校验"""

    def test_missing_time(self):
        trace = Trace()
        with self.assertRaises(MalformedEventError):
            trace.on_entered_frame({'name': 'f'})
        with self.assertRaises(MalformedEventError):
            trace.on_exited_frame({})
        self.assertEqual(len(trace.frames), 0)
        self.assertEqual(len(trace.functions), 0)
        self.assertIsNone(trace.start_time)
        self.assertFalse(trace.finished)

    def test_invalid_fields(self):
        with self.assertRaises(MalformedEventError):
            EnteredFrameEvent(time='5')
        with self.assertRaises(MalformedEventError):
            EnteredFrameEvent(time=True)
        with self.assertRaises(MalformedEventError):
            EnteredFrameEvent(time=1, parameter_names='abc')
        with self.assertRaises(MalformedEventError):
            EnteredFrameEvent.from_dict(['not', 'a', 'dict'])
        with self.assertRaises(MalformedEventError):
            ExitedFrameEvent.from_dict({'time': 1, 'return': 1, 'throw': 2})
        with self.assertRaises(MalformedEventError):
            ExitedFrameEvent(time=1, completion_type='raise')

    def test_malformed_event_is_a_value_error(self):
        with self.assertRaises(ValueError):
            ExitedFrameEvent.from_dict({'time': None})

    def test_failed_exit_keeps_stack(self):
        trace = Trace()
        trace.on_entered_frame({'name': 'f', 'time': 0})
        with self.assertRaises(MalformedEventError):
            trace.on_exited_frame({'time': 'later'})
        self.assertEqual(len(trace.open_frames), 1)
        frame = trace.on_exited_frame({'time': 2})
        self.assertEqual(frame.total_time, 2)


class TestObservers(unittest.TestCase):
    """测试观察者和事件源"""

    def test_observer_order(self):
        trace = Trace()
        log = []
        trace.on(ENTERED_FRAME, lambda frame: log.append(('entered', frame.name)))
        trace.on(EXITED_FRAME, lambda frame: log.append(('exited', frame.name)))
        trace.on(FINISHED, lambda t: log.append(('finished', None)))

        trace.on_entered_frame({'name': 'A', 'time': 0})
        trace.on_entered_frame({'name': 'B', 'time': 1})
        trace.on_exited_frame({'time': 2})
        trace.on_exited_frame({'time': 3})
        trace.finish()

        self.assertEqual(log, [
            ('entered', 'A'), ('entered', 'B'), ('exited', 'B'), ('exited', 'A'), ('finished', None),
        ])

    def test_attach_and_detach(self):
        source = EventEmitter()
        trace = Trace(source, name='live')
        self.assertEqual(source.listener_count(ENTERED_FRAME), 1)
        self.assertEqual(source.listener_count(EXITED_FRAME), 1)

        source.emit(ENTERED_FRAME, EnteredFrameEvent(time=0, name='f'))
        source.emit(EXITED_FRAME, ExitedFrameEvent(time=1))
        self.assertEqual(len(trace.frames), 1)

        # 下溢结束追踪并解绑
        source.emit(EXITED_FRAME, ExitedFrameEvent(time=2))
        self.assertTrue(trace.finished)
        self.assertEqual(source.listener_count(ENTERED_FRAME), 0)
        self.assertEqual(source.listener_count(EXITED_FRAME), 0)

        # 解绑后事件源的事件不会再到达追踪
        source.emit(ENTERED_FRAME, EnteredFrameEvent(time=3, name='g'))
        self.assertEqual(len(trace.frames), 1)

    def test_attach_twice(self):
        trace = Trace(EventEmitter())
        with self.assertRaises(ValueError):
            trace.attach(EventEmitter())

    def test_off(self):
        emitter = EventEmitter()
        calls = []
        callback = emitter.on('x', calls.append)
        self.assertTrue(emitter.off('x', callback))
        self.assertFalse(emitter.off('x', callback))
        emitter.emit('x', 1)
        self.assertEqual(calls, [])


class TestTreeUtils(unittest.TestCase):
    def setUp(self):
        self.trace = Trace()
        self.trace.on_entered_frame({'name': 'main', 'time': 0})
        self.trace.on_entered_frame({'name': 'load', 'time': 1})
        self.trace.on_entered_frame({'name': 'parse', 'time': 2})
        self.trace.on_exited_frame({'time': 3})
        self.trace.on_exited_frame({'time': 4})
        self.trace.on_exited_frame({'time': 6})

    def test_get_call_stack(self):
        parse = self.trace.frames[2]
        self.assertEqual(get_call_stack(self.trace, parse), ['main', 'load', 'parse'])

    def test_iter_frames(self):
        self.assertEqual([f.name for f in self.trace.iter_frames()], ['main', 'load', 'parse'])

    def test_statistics(self):
        stats = get_tree_statistics(self.trace)
        self.assertEqual(stats['total_frames'], 3)
        self.assertEqual(stats['root_frames'], 1)
        self.assertEqual(stats['closed_frames'], 3)
        self.assertEqual(stats['max_depth'], 2)
        self.assertEqual(stats['total_time'], 6)

    def test_format_tree(self):
        lines = format_call_stack_tree(self.trace, max_depth=1)
        self.assertEqual(len(lines), 2)
        self.assertTrue(lines[0].startswith('main'))
        self.assertTrue(lines[1].startswith('└── load'))
        self.assertTrue(lines[0].endswith('calls=1)'))
        self.assertIs(self.trace.function_of(self.trace.frames[2]), self.trace.functions[2])

    def test_frame_repr_omits_children(self):
        self.assertNotIn('children', repr(self.trace.frames[0]))

    def test_format_deep_tree(self):
        trace = Trace()
        for i in range(1500):
            trace.on_entered_frame({'name': 'rec', 'time': i})
        for i in range(1500):
            trace.on_exited_frame({'time': 1500 + i})
        lines = format_call_stack_tree(trace, max_depth=2000)
        self.assertEqual(len(lines), 1500)
        self.assertTrue(lines[-1].lstrip().startswith('└── rec'))
        self.assertEqual(len(get_call_stack(trace, trace.frames[-1])), 1500)


if __name__ == '__main__':
    unittest.main()
