# -*- coding: utf-8 -*-
"""
可见范围查询：在按结束时间排序的兄弟帧中二分查找第一个可能可见的帧
"""

from typing import Any, Callable, Iterator, List, Optional, Sequence

from ..models import Frame


def binary_search(key: Any, items: Sequence[Any], comparator: Callable[[Any, Any], float],
                  lo: int = 0, hi: Optional[int] = None) -> int:
    """
    二分查找

    Args:
        key: 查找的键
        items: 已排序序列
        comparator: comparator(key, item)，小于 0 表示 key 在 item 之前
        lo: 查找起点
        hi: 查找终点（不包含），默认为序列长度

    Returns:
        int: 命中时返回下标；未命中返回 -(插入点 + 1)
    """
    first = lo
    last = (len(items) if hi is None else hi) - 1

    while first <= last:
        mid = (first + last) // 2
        c = comparator(key, items[mid])
        if c > 0:
            first = mid + 1
        elif c < 0:
            last = mid - 1
        else:
            return mid

    return -(first + 1)


def _compare_end_time(time: float, frame: Frame) -> float:
    return time - frame.end_time


def closed_prefix_length(children: Sequence[Frame]) -> int:
    """已退出的兄弟帧数量；未退出的帧只可能是最后一个"""
    if children and not children[-1].is_closed:
        return len(children) - 1
    return len(children)


def find_first_visible(children: Sequence[Frame], time: float) -> int:
    """
    查找第一个结束时间 >= time 的已退出帧

    Args:
        children: 按结束时间升序排列的兄弟帧
        time: 窗口左边界时间

    Returns:
        int: 下标；没有满足条件的帧时返回已退出帧的数量
    """
    count = closed_prefix_length(children)
    idx = binary_search(time, children, _compare_end_time, hi=count)
    if idx < 0:
        return -(idx + 1)
    # 结束时间相同的帧可能有多个，取最左边的
    while idx > 0 and children[idx - 1].end_time >= time:
        idx -= 1
    return idx


def _visible_children(parent: Any, left_time: float, right_time: float) -> List[Frame]:
    """
    一个父节点下与窗口相交的子帧

    已退出的子帧按结束时间二分定位；仍在运行的最后一个子帧视为延伸到无穷远，
    开始时间不晚于 right_time 即可见。
    """
    if getattr(parent, 'total_time', None) == 0:
        return []

    children = parent.children
    count = closed_prefix_length(children)
    visible = []
    for i in range(find_first_visible(children, left_time), count):
        child = children[i]
        if child.start_time > right_time:
            return visible
        visible.append(child)
    if count < len(children) and children[-1].start_time <= right_time:
        visible.append(children[-1])
    return visible


def iter_visible_frames(parent: Any, left_time: float, right_time: float) -> Iterator[Frame]:
    """
    深度优先列出与 [left_time, right_time] 相交的帧

    还没有任何帧退出的追踪返回空结果。

    Args:
        parent: Trace 或 Frame，需要有 children 属性
        left_time: 窗口左边界
        right_time: 窗口右边界

    Yields:
        Frame: 可见帧，顺序与绘制顺序一致
    """
    frames = getattr(parent, 'frames', None)
    if frames is not None and not any(frame.is_closed for frame in frames):
        return

    stack = list(reversed(_visible_children(parent, left_time, right_time)))
    while stack:
        frame = stack.pop()
        yield frame
        stack.extend(reversed(_visible_children(frame, left_time, right_time)))
