import random
import unittest

from frame_trace_tool.models import Frame
from frame_trace_tool.trace import Trace
from frame_trace_tool.utils.search import (
    binary_search, find_first_visible, iter_visible_frames, closed_prefix_length,
)


def make_frames(intervals):
    return [Frame(uid=i, fid=0, depth=0, start_time=start, end_time=end,
                  total_time=None if end is None else end - start)
            for i, (start, end) in enumerate(intervals)]


class TestBinarySearch(unittest.TestCase):
    def setUp(self):
        self.items = [1, 3, 5, 7]
        self.compare = lambda key, item: key - item

    def test_exact_match(self):
        for i, item in enumerate(self.items):
            self.assertEqual(binary_search(item, self.items, self.compare), i)

    def test_miss_encoding(self):
        self.assertEqual(binary_search(0, self.items, self.compare), -1)
        self.assertEqual(binary_search(4, self.items, self.compare), -3)
        self.assertEqual(binary_search(8, self.items, self.compare), -5)
        self.assertEqual(binary_search(4, [], self.compare), -1)

    def test_hi_bound(self):
        self.assertEqual(binary_search(7, self.items, self.compare, hi=3), -4)


class TestFindFirstVisible(unittest.TestCase):
    def test_partition_property(self):
        rng = random.Random(7)
        for _ in range(50):
            ends = sorted(rng.randint(0, 30) for _ in range(rng.randint(0, 12)))
            frames = make_frames([(end - 1, end) for end in ends])
            for t in range(-2, 34):
                idx = find_first_visible(frames, t)
                self.assertTrue(all(f.end_time < t for f in frames[:idx]))
                self.assertTrue(all(f.end_time >= t for f in frames[idx:]))

    def test_duplicate_end_times(self):
        frames = make_frames([(0, 2), (3, 4), (4, 4), (4, 4), (5, 6)])
        self.assertEqual(find_first_visible(frames, 4), 1)
        self.assertEqual(find_first_visible(frames, 7), 5)

    def test_open_last_child_is_skipped(self):
        frames = make_frames([(0, 2), (3, None)])
        self.assertEqual(closed_prefix_length(frames), 1)
        self.assertEqual(find_first_visible(frames, 5), 1)
        self.assertEqual(find_first_visible(make_frames([(3, None)]), 0), 0)


class TestVisibleFrames(unittest.TestCase):
    def setUp(self):
        self.trace = Trace()
        self.trace.on_entered_frame({'name': 'A', 'time': 0})
        for name, start, end in [('B', 1, 3), ('C', 4, 6), ('D', 7, 9)]:
            self.trace.on_entered_frame({'name': name, 'time': start})
            self.trace.on_exited_frame({'time': end})
        self.trace.on_exited_frame({'time': 10})

    def names(self, left, right):
        return [f.name for f in iter_visible_frames(self.trace, left, right)]

    def test_window(self):
        self.assertEqual(self.names(3.5, 6.5), ['A', 'C'])
        self.assertEqual(self.names(3, 6.5), ['A', 'B', 'C'])
        self.assertEqual(self.names(0, 10), ['A', 'B', 'C', 'D'])
        self.assertEqual(self.names(11, 20), [])

    def test_live_trace_without_closed_frames(self):
        trace = Trace()
        trace.on_entered_frame({'name': 'A', 'time': 5})
        trace.on_entered_frame({'name': 'B', 'time': 6})
        self.assertEqual(list(iter_visible_frames(trace, 0, 100)), [])
        self.assertEqual(list(iter_visible_frames(Trace(), 0, 100)), [])

    def test_open_root_with_closed_children(self):
        trace = Trace()
        trace.on_entered_frame({'name': 'main', 'time': 0})
        for start, end in [(1, 5), (6, 9)]:
            trace.on_entered_frame({'name': 'work', 'time': start})
            trace.on_exited_frame({'time': end})

        uids = lambda left, right: [f.uid for f in iter_visible_frames(trace, left, right)]
        self.assertEqual(uids(0, 9), [0, 1, 2])
        self.assertEqual(uids(6, 9), [0, 2])
        self.assertEqual(uids(0, 0.5), [0])

    def test_running_leaf_is_visible(self):
        trace = Trace()
        trace.on_entered_frame({'name': 'main', 'time': 0})
        trace.on_entered_frame({'name': 'work', 'time': 1})
        trace.on_exited_frame({'time': 2})
        trace.on_entered_frame({'name': 'inner', 'time': 3})
        self.assertEqual([f.name for f in iter_visible_frames(trace, 0, 10)], ['main', 'work', 'inner'])
        self.assertEqual([f.name for f in iter_visible_frames(trace, 2.5, 10)], ['main', 'inner'])

    def test_deep_tree(self):
        trace = Trace()
        for i in range(1500):
            trace.on_entered_frame({'name': 'rec', 'time': i})
        for i in range(1500):
            trace.on_exited_frame({'time': 1500 + i})
        frames = list(iter_visible_frames(trace, 0, 3000))
        self.assertEqual([f.depth for f in frames], list(range(1500)))
        self.assertEqual(len(list(iter_visible_frames(trace, 0, 1497.5))), 1498)

    def test_zero_length_parent(self):
        trace = Trace()
        trace.on_entered_frame({'name': 'A', 'time': 2})
        trace.on_entered_frame({'name': 'B', 'time': 2})
        trace.on_exited_frame({'time': 2})
        trace.on_exited_frame({'time': 2})
        # A 的总时长为 0，不再展开子帧
        self.assertEqual([f.name for f in iter_visible_frames(trace, 0, 5)], ['A'])


if __name__ == '__main__':
    unittest.main()
