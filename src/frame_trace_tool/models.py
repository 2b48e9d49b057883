# -*- coding: utf-8 -*-
"""
调用追踪数据模型定义
"""

from dataclasses import dataclass, field
from numbers import Real
from typing import Dict, List, Any, Optional, Sequence


COMPLETION_TYPES = ('return', 'throw', 'yield')


class TraceError(Exception):
    """追踪相关错误的基类"""


class MalformedEventError(TraceError, ValueError):
    """事件数据不合法（缺少必需字段或字段类型错误）"""


class TraceFinishedError(TraceError, RuntimeError):
    """追踪已结束后仍然收到事件"""


def _validate_time(value: Any, event_type: str) -> float:
    if value is None:
        raise MalformedEventError(f"{event_type} 事件缺少 time 字段")
    if isinstance(value, bool) or not isinstance(value, Real):
        raise MalformedEventError(f"{event_type} 事件的 time 字段必须是数字: {value!r}")
    return value


@dataclass
class EnteredFrameEvent:
    """函数进入事件"""
    time: float
    name: str = ''
    location: Any = None
    parameter_names: List[str] = field(default_factory=list)
    callsite: Any = None
    arguments: Optional[List[Any]] = None

    def __post_init__(self):
        self.time = _validate_time(self.time, 'entered')
        if self.name is None:
            self.name = ''
        if not isinstance(self.name, str):
            raise MalformedEventError(f"函数名必须是字符串: {self.name!r}")
        if self.parameter_names is None:
            self.parameter_names = []
        if isinstance(self.parameter_names, str) or not isinstance(self.parameter_names, Sequence):
            raise MalformedEventError(f"parameterNames 必须是字符串列表: {self.parameter_names!r}")
        if not all(isinstance(p, str) for p in self.parameter_names):
            raise MalformedEventError(f"parameterNames 必须是字符串列表: {self.parameter_names!r}")
        self.parameter_names = list(self.parameter_names)

    @classmethod
    def from_dict(cls, packet: Dict[str, Any]) -> 'EnteredFrameEvent':
        """
        从原始数据包创建进入事件

        Args:
            packet: 包含 name, location, parameterNames, callsite, arguments, time 的字典

        Returns:
            EnteredFrameEvent: 校验后的事件
        """
        if not isinstance(packet, dict):
            raise MalformedEventError(f"事件数据必须是字典: {type(packet).__name__}")
        return cls(
            time=packet.get('time'),
            name=packet.get('name', ''),
            location=packet.get('location'),
            parameter_names=packet.get('parameterNames'),
            callsite=packet.get('callsite'),
            arguments=packet.get('arguments'),
        )


@dataclass
class ExitedFrameEvent:
    """函数退出事件，return/throw/yield 至多出现一个"""
    time: float
    completion_type: Optional[str] = None
    value: Any = None

    def __post_init__(self):
        self.time = _validate_time(self.time, 'exited')
        if self.completion_type is not None and self.completion_type not in COMPLETION_TYPES:
            raise MalformedEventError(f"未知的退出类型: {self.completion_type}")

    @classmethod
    def from_dict(cls, packet: Dict[str, Any]) -> 'ExitedFrameEvent':
        """
        从原始数据包创建退出事件

        Args:
            packet: 包含 time 以及可选 return/throw/yield 的字典

        Returns:
            ExitedFrameEvent: 校验后的事件
        """
        if not isinstance(packet, dict):
            raise MalformedEventError(f"事件数据必须是字典: {type(packet).__name__}")
        present = [t for t in COMPLETION_TYPES if t in packet]
        if len(present) > 1:
            raise MalformedEventError(f"退出事件只能包含一个 return/throw/yield 字段: {present}")
        completion_type = present[0] if present else None
        return cls(
            time=packet.get('time'),
            completion_type=completion_type,
            value=packet[completion_type] if completion_type else None,
        )


@dataclass
class FunctionRecord:
    """函数聚合统计信息"""
    id: int
    name: str
    location: Any = None
    parameter_names: List[str] = field(default_factory=list)
    count: int = 0
    total_time: Optional[float] = None
    self_time: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        """转换为序列化格式"""
        result = {
            'count': self.count,
            'name': self.name,
            'location': self.location,
            'parameterNames': self.parameter_names,
        }
        if self.total_time is not None:
            result['totalTime'] = self.total_time
            result['selfTime'] = self.self_time
        return result


@dataclass(eq=False)
class Frame:
    """
    一次具体的函数调用

    older_uid/previous_uid/next_uid 只是指向 Trace.frames 的索引，
    子帧只由 children 持有。
    """
    uid: int
    fid: int
    depth: int
    start_time: float
    name: str = ''
    location: Any = None
    parameter_names: List[str] = field(default_factory=list)
    callsite: Any = None
    arguments: Optional[List[Any]] = None
    end_time: Optional[float] = None
    total_time: Optional[float] = None
    self_time: Optional[float] = None
    completion_type: Optional[str] = None
    return_value: Any = None
    thrown_value: Any = None
    yielded_value: Any = None
    older_uid: Optional[int] = None
    previous_uid: Optional[int] = None
    next_uid: Optional[int] = None
    children: List['Frame'] = field(default_factory=list, repr=False)

    @property
    def is_closed(self) -> bool:
        return self.end_time is not None

    @property
    def completion_value(self) -> Any:
        if self.completion_type == 'return':
            return self.return_value
        if self.completion_type == 'throw':
            return self.thrown_value
        if self.completion_type == 'yield':
            return self.yielded_value
        return None

    def set_completion(self, completion_type: Optional[str], value: Any):
        """记录 return/throw/yield 结果"""
        self.completion_type = completion_type
        if completion_type == 'return':
            self.return_value = value
        elif completion_type == 'throw':
            self.thrown_value = value
        elif completion_type == 'yield':
            self.yielded_value = value

    def _node_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {'fid': self.fid, 'startTime': self.start_time}
        if self.end_time is not None:
            result['endTime'] = self.end_time
        if self.arguments is not None:
            result['arguments'] = self.arguments
        if self.completion_type is not None:
            result[self.completion_type] = self.completion_value
        return result

    def to_dict(self) -> Dict[str, Any]:
        """
        转换为稀疏的序列化格式，只输出实际存在的字段

        调用树可能很深，这里用显式栈按后序生成节点，不做递归。
        """
        built: Dict[int, Dict[str, Any]] = {}
        stack = [(self, False)]
        while stack:
            frame, expanded = stack.pop()
            if not expanded:
                stack.append((frame, True))
                stack.extend((child, False) for child in frame.children)
                continue
            node = frame._node_dict()
            node['children'] = [built.pop(id(child)) for child in frame.children]
            built[id(frame)] = node
        return built[id(self)]
