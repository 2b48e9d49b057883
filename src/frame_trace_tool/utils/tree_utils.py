"""
树结构处理工具模块
"""

from typing import Any, Dict, Iterable, Iterator, List

from ..models import Frame


def get_call_stack(trace, frame: Frame) -> List[str]:
    """
    获取从根到当前帧的调用栈路径

    Args:
        trace: 帧所属的 Trace
        frame: 目标帧

    Returns:
        List[str]: 函数名列表
    """
    path = []
    current = frame
    while current is not None:
        path.append(current.name)
        current = trace.older_frame(current)
    return list(reversed(path))


def walk_frames(roots: Iterable[Frame]) -> Iterator[Frame]:
    """深度优先遍历"""
    stack = list(reversed(list(roots)))
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def _format_time(value) -> str:
    return '-' if value is None else f"{value:.2f}"


def format_call_stack_tree(trace, max_depth: int = 10) -> List[str]:
    """
    生成调用树的文本行

    Args:
        trace: Trace
        max_depth: 最大深度

    Returns:
        List[str]: 每个帧一行
    """
    lines = []
    # 显式栈，保持先序输出
    stack = [(root, "", "") for root in reversed(trace.children)]
    while stack:
        frame, prefix, child_prefix = stack.pop()
        if frame.depth > max_depth:
            continue
        lines.append(f"{prefix}{frame.name or '(anonymous)'} "
                     f"(start={_format_time(frame.start_time)}, total={_format_time(frame.total_time)}, "
                     f"self={_format_time(frame.self_time)}, calls={trace.function_of(frame).count})")
        last = len(frame.children) - 1
        for i in range(last, -1, -1):
            is_last = i == last
            stack.append((frame.children[i],
                          child_prefix + ("└── " if is_last else "├── "),
                          child_prefix + ("    " if is_last else "│   ")))
    return lines


def print_call_stack_tree(trace, max_depth: int = 10):
    """打印调用树结构"""
    for line in format_call_stack_tree(trace, max_depth):
        print(line)


def get_tree_statistics(trace) -> Dict[str, Any]:
    """
    获取调用树的统计信息

    Args:
        trace: Trace

    Returns:
        Dict[str, Any]: 统计信息
    """
    closed = sum(1 for frame in trace.frames if frame.is_closed)
    return {
        'total_frames': len(trace.frames),
        'root_frames': len(trace.children),
        'closed_frames': closed,
        'open_frames': len(trace.frames) - closed,
        'max_depth': trace.max_depth,
        'total_functions': len(trace.functions),
        'start_time': trace.start_time,
        'end_time': trace.end_time,
        'total_time': trace.total_time,
        'finished': trace.finished,
    }
