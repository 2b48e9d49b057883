# -*- coding: utf-8 -*-
"""
Trace 容器：持有调用树、帧索引、函数聚合表和整体时间范围
"""

import json
import logging
from typing import Any, Dict, Iterator, List, Optional, Union

from .aggregator import FunctionAggregator
from .call_stack_builder import FrameTreeBuilder
from .events import EventEmitter, ENTERED_FRAME, EXITED_FRAME, FINISHED
from .models import (
    EnteredFrameEvent, ExitedFrameEvent, Frame, FunctionRecord, TraceFinishedError,
)

logger = logging.getLogger(__name__)


class Trace(EventEmitter):
    """
    一次完整的函数调用追踪

    生命周期: 创建 -> 绑定事件源 -> 接收进入/退出事件 -> finish()。
    finish 之后树和聚合表只读。

    Args:
        source: 事件源，需要提供 on/off 方法，发出 entered_frame / exited_frame 事件
        name: 追踪名称
    """

    def __init__(self, source: Optional[EventEmitter] = None, name: Optional[str] = None):
        super().__init__()
        self.name = name
        self.children: List[Frame] = []
        self.frames: List[Frame] = []
        self.max_depth = 0
        self.start_time: Optional[float] = None
        self.end_time: Optional[float] = None
        self.finished = False

        self._aggregator = FunctionAggregator()
        self.functions: List[FunctionRecord] = self._aggregator.records
        self._builder: Optional[FrameTreeBuilder] = FrameTreeBuilder(self, self._aggregator)
        self._source = None

        if source is not None:
            self.attach(source)

    def __repr__(self):
        return (f"Trace(name={self.name!r}, frames={len(self.frames)}, "
                f"functions={len(self.functions)}, finished={self.finished})")

    @property
    def total_time(self) -> float:
        """时间以追踪起点为原点，总时长即最后的时间水位"""
        return self.end_time or 0

    @property
    def open_frames(self) -> List[Frame]:
        """当前仍在栈上的帧，追踪结束后为空"""
        return self._builder.open_frames if self._builder else []

    def attach(self, source: EventEmitter):
        """绑定事件源"""
        if self.finished:
            raise TraceFinishedError("追踪已结束，不能再绑定事件源")
        if self._source is not None:
            raise ValueError("追踪已经绑定了事件源")
        self._source = source
        source.on(ENTERED_FRAME, self.on_entered_frame)
        source.on(EXITED_FRAME, self.on_exited_frame)

    def _detach(self):
        if self._source is not None:
            self._source.off(ENTERED_FRAME, self.on_entered_frame)
            self._source.off(EXITED_FRAME, self.on_exited_frame)
            self._source = None

    def finish(self):
        """结束追踪：解绑事件源，冻结调用栈和聚合表"""
        if self.finished:
            return
        self._detach()
        open_count = len(self.open_frames)
        if open_count:
            logger.warning(f"追踪结束时仍有 {open_count} 个帧未退出")
        self._builder = None
        self._aggregator.freeze()
        self.finished = True
        logger.info(f"追踪结束: {len(self.frames)} 个帧, {len(self.functions)} 个函数, 最大深度 {self.max_depth}")
        self.emit(FINISHED, self)

    def on_entered_frame(self, packet: Union[EnteredFrameEvent, Dict[str, Any]]) -> Frame:
        """
        处理函数进入事件

        Args:
            packet: EnteredFrameEvent 或原始字典

        Returns:
            Frame: 新创建的帧
        """
        event = packet if isinstance(packet, EnteredFrameEvent) else EnteredFrameEvent.from_dict(packet)
        if self.finished:
            raise TraceFinishedError("追踪已结束，不再接收进入事件")
        frame = self._builder.enter(event)
        self.emit(ENTERED_FRAME, frame)
        return frame

    def on_exited_frame(self, packet: Union[ExitedFrameEvent, Dict[str, Any]]) -> Optional[Frame]:
        """
        处理函数退出事件

        退出事件多于进入事件说明追踪开始时已有帧在栈上，此时直接结束追踪。

        Args:
            packet: ExitedFrameEvent 或原始字典

        Returns:
            Optional[Frame]: 退出的帧，栈下溢时返回 None
        """
        event = packet if isinstance(packet, ExitedFrameEvent) else ExitedFrameEvent.from_dict(packet)
        if self.finished:
            raise TraceFinishedError("追踪已结束，不再接收退出事件")
        frame = self._builder.exit(event)
        if frame is None:
            logger.info(f"退出事件多于进入事件 (t={event.time})，结束追踪")
            self.finish()
            return None
        self.emit(EXITED_FRAME, frame)
        return frame

    def frame_by_uid(self, uid: int) -> Frame:
        return self.frames[uid]

    def _frame_or_none(self, uid: Optional[int]) -> Optional[Frame]:
        return None if uid is None else self.frames[uid]

    def older_frame(self, frame: Frame) -> Optional[Frame]:
        """调用者帧，根帧返回 None"""
        return self._frame_or_none(frame.older_uid)

    def previous_frame(self, frame: Frame) -> Optional[Frame]:
        return self._frame_or_none(frame.previous_uid)

    def next_frame(self, frame: Frame) -> Optional[Frame]:
        return self._frame_or_none(frame.next_uid)

    def function_of(self, frame: Frame) -> FunctionRecord:
        """帧对应的函数聚合记录"""
        return self.functions[frame.fid]

    def iter_frames(self) -> Iterator[Frame]:
        """深度优先遍历所有帧"""
        stack = list(reversed(self.children))
        while stack:
            frame = stack.pop()
            yield frame
            stack.extend(reversed(frame.children))

    def to_dict(self) -> Dict[str, Any]:
        """
        转换为可序列化的结构

        Returns:
            Dict[str, Any]: {functions: [...], children: [...]}
        """
        return {
            'functions': self._aggregator.to_list(),
            'children': [child.to_dict() for child in self.children],
        }

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
