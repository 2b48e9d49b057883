# -*- coding: utf-8 -*-
"""
追踪快照和事件日志解析器
"""

import gzip
import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from .events import EventEmitter, ENTERED_FRAME, EXITED_FRAME
from .models import (
    COMPLETION_TYPES, EnteredFrameEvent, ExitedFrameEvent, MalformedEventError,
)
from .trace import Trace

logger = logging.getLogger(__name__)


def _open_text(file_path: Path, mode: str):
    if file_path.suffix == '.gz':
        return gzip.open(file_path, mode + 't', encoding='utf-8')
    return open(file_path, mode, encoding='utf-8')


def _enter_node(trace: Trace, functions: List[Dict[str, Any]], node: Dict[str, Any]):
    try:
        aggregated = functions[node['fid']]
    except (KeyError, IndexError, TypeError) as e:
        raise MalformedEventError(f"帧节点的 fid 无效: {node!r}") from e

    trace.on_entered_frame(EnteredFrameEvent(
        time=node.get('startTime'),
        name=aggregated.get('name', ''),
        location=aggregated.get('location'),
        parameter_names=aggregated.get('parameterNames'),
        callsite=node.get('callsite'),
        arguments=node.get('arguments'),
    ))


def _exit_node(trace: Trace, node: Dict[str, Any]):
    # 快照时仍未退出的帧只会出现在最右侧的一条链上，保持打开即可
    if node.get('endTime') is None:
        return

    exit_packet = {'time': node['endTime']}
    for completion_type in COMPLETION_TYPES:
        if completion_type in node:
            exit_packet[completion_type] = node[completion_type]
    trace.on_exited_frame(ExitedFrameEvent.from_dict(exit_packet))


def _replay_nodes(trace: Trace, functions: List[Dict[str, Any]], roots: List[Dict[str, Any]]):
    """深度优先重放帧节点：进入、重放子节点、退出。使用显式栈，不受调用树深度限制"""
    stack = [(node, False) for node in reversed(roots)]
    while stack:
        node, entered = stack.pop()
        if entered:
            _exit_node(trace, node)
            continue
        _enter_node(trace, functions, node)
        stack.append((node, True))
        stack.extend((child, False) for child in reversed(node.get('children', [])))


def parse_trace(data: Union[str, bytes, Dict[str, Any]], name: Optional[str] = None) -> Trace:
    """
    从快照重建追踪

    Args:
        data: JSON 字符串/字节或 {functions, children} 字典
        name: 追踪名称

    Returns:
        Trace: 已结束的追踪
    """
    if isinstance(data, (str, bytes)):
        data = json.loads(data)
    if not isinstance(data, dict) or 'functions' not in data or 'children' not in data:
        raise ValueError("快照格式错误: 需要包含 functions 和 children")

    trace = Trace(name=name)
    functions = data['functions']
    _replay_nodes(trace, functions, data['children'])

    trace.finish()
    return trace


def load_trace(file_path: Union[str, Path]) -> Trace:
    """
    读取 JSON 快照文件，支持 .gz 压缩

    Args:
        file_path: 快照路径

    Returns:
        Trace: 已结束的追踪
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"文件不存在: {file_path}")

    logger.info(f"正在解析快照: {file_path}")
    with _open_text(file_path, 'r') as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"JSON 解析失败: {file_path}: {e}") from e
    return parse_trace(data, name=file_path.name)


def save_trace(trace: Trace, file_path: Union[str, Path], indent: Optional[int] = None) -> Path:
    """将追踪写为 JSON 快照，.gz 后缀时压缩"""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with _open_text(file_path, 'w') as f:
        json.dump(trace.to_dict(), f, indent=indent, ensure_ascii=False)
    logger.info(f"快照已保存: {file_path}")
    return file_path


class ReplaySource(EventEmitter):
    """
    重放事件日志的事件源

    每条记录形如 {"type": "entered", "name": ..., "time": ...}
    或 {"type": "exited", "time": ..., "return": ...}。
    """

    def replay(self, records: Iterable[Dict[str, Any]]) -> int:
        """
        按顺序发出事件

        Args:
            records: 事件记录

        Returns:
            int: 发出的事件数
        """
        count = 0
        for index, record in enumerate(records):
            if not isinstance(record, dict):
                raise MalformedEventError(f"第 {index} 条事件不是字典: {record!r}")
            event_type = record.get('type')
            if event_type == 'entered':
                event = EnteredFrameEvent.from_dict(record)
                self.emit(ENTERED_FRAME, event)
            elif event_type == 'exited':
                event = ExitedFrameEvent.from_dict(record)
                self.emit(EXITED_FRAME, event)
            else:
                raise MalformedEventError(f"第 {index} 条事件类型未知: {event_type!r}")
            count += 1
        return count


def load_event_log(file_path: Union[str, Path]) -> List[Dict[str, Any]]:
    """
    读取事件日志，支持 JSON 数组或每行一个 JSON 对象

    Args:
        file_path: 日志路径

    Returns:
        List[Dict[str, Any]]: 事件记录列表
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"文件不存在: {file_path}")

    with _open_text(file_path, 'r') as f:
        content = f.read()

    stripped = content.lstrip()
    try:
        if stripped.startswith('['):
            records = json.loads(stripped)
        else:
            records = [json.loads(line) for line in content.splitlines() if line.strip()]
    except json.JSONDecodeError as e:
        raise ValueError(f"事件日志解析失败: {file_path}: {e}") from e

    logger.info(f"读取到 {len(records)} 条事件: {file_path}")
    return records


def record_trace_events(records: Iterable[Dict[str, Any]], name: Optional[str] = None) -> Trace:
    """
    将事件记录重放到一个新的追踪中

    Args:
        records: 事件记录
        name: 追踪名称

    Returns:
        Trace: 已结束的追踪
    """
    source = ReplaySource()
    trace = Trace(source, name=name)
    # 下溢会提前结束追踪并解绑，之后的事件不会再被处理
    source.replay(records)
    if not trace.finished:
        trace.finish()
    return trace
