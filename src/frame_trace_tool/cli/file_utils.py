"""
文件处理工具模块
"""

from pathlib import Path

from ..parser import load_event_log, load_trace, record_trace_events
from ..trace import Trace


def is_event_log(file_path: str) -> bool:
    """.jsonl / .jsonl.gz 默认视为事件日志"""
    return '.jsonl' in [s.lower() for s in Path(file_path).suffixes]


def load_trace_file(file_path: str, events: bool = False) -> Trace:
    """
    读取快照或事件日志

    Args:
        file_path: 文件路径
        events: 强制按事件日志读取

    Returns:
        Trace: 已结束的追踪
    """
    if events or is_event_log(file_path):
        records = load_event_log(file_path)
        return record_trace_events(records, name=Path(file_path).name)
    return load_trace(file_path)


def output_base_name(file_path: str, suffix: str) -> str:
    """根据输入文件名生成输出文件名"""
    name = Path(file_path).name
    for ext in ('.gz', '.jsonl', '.json'):
        if name.lower().endswith(ext):
            name = name[:-len(ext)]
    return f"{name}_{suffix}"
