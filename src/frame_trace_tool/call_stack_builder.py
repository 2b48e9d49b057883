# -*- coding: utf-8 -*-
"""
基于调用栈的帧树构建算法

事件按发生顺序逐个处理，进入事件压栈，退出事件出栈并计算耗时。
时间复杂度: 进入 O(1)，退出 O(子帧数)
"""

import logging
from typing import TYPE_CHECKING, List, Optional, Union

from .aggregator import FunctionAggregator
from .models import EnteredFrameEvent, ExitedFrameEvent, Frame

if TYPE_CHECKING:
    from .trace import Trace

logger = logging.getLogger(__name__)


class _RootSentinel:
    """栈底的哨兵，代表追踪根节点"""
    depth = -1

    def __repr__(self):
        return '<root>'


ROOT = _RootSentinel()


class FrameTreeBuilder:
    """基于调用栈的帧树构建器"""

    def __init__(self, trace: 'Trace', aggregator: FunctionAggregator):
        self.logger = logger
        self.trace = trace
        self.aggregator = aggregator
        self._stack: List[Union[_RootSentinel, Frame]] = [ROOT]

    @property
    def depth(self) -> int:
        """当前栈中真实帧的数量"""
        return len(self._stack) - 1

    @property
    def current_frame(self) -> Optional[Frame]:
        top = self._stack[-1]
        return None if top is ROOT else top

    @property
    def open_frames(self) -> List[Frame]:
        return list(self._stack[1:])

    def enter(self, event: EnteredFrameEvent) -> Frame:
        """
        处理函数进入事件

        Args:
            event: 已校验的进入事件

        Returns:
            Frame: 新创建的帧
        """
        trace = self.trace
        current = self._stack[-1]

        fid = self.aggregator.resolve(event.name, event.location, event.parameter_names)
        aggregated = self.aggregator.count_call(fid)

        frame = Frame(
            uid=len(trace.frames),
            fid=fid,
            depth=len(self._stack) - 1,
            start_time=event.time,
            name=aggregated.name,
            location=aggregated.location,
            parameter_names=aggregated.parameter_names,
            callsite=event.callsite,
            arguments=event.arguments,
        )

        # 添加父帧和兄弟帧的引用
        if current is ROOT:
            siblings = trace.children
        else:
            frame.older_uid = current.uid
            siblings = current.children
        if siblings:
            previous = siblings[-1]
            frame.previous_uid = previous.uid
            previous.next_uid = frame.uid

        trace.frames.append(frame)
        siblings.append(frame)
        self._stack.append(frame)
        if frame.depth > trace.max_depth:
            trace.max_depth = frame.depth

        # 进入事件本身也是一个时间水位
        if trace.start_time is None:
            trace.start_time = frame.start_time
        trace.end_time = frame.start_time

        self.logger.debug(f"进入帧 {frame.uid} {frame.name} (depth={frame.depth}, t={frame.start_time})")
        return frame

    def exit(self, event: ExitedFrameEvent) -> Optional[Frame]:
        """
        处理函数退出事件

        Args:
            event: 已校验的退出事件

        Returns:
            Optional[Frame]: 退出的帧；栈中已没有真实帧时返回 None，不做任何修改
        """
        frame = self._stack[-1]
        if frame is ROOT:
            return None

        self._stack.pop()

        frame.end_time = event.time
        frame.total_time = frame.end_time - frame.start_time
        # 子帧总是先于父帧退出，这里的求和是完整的
        self_time = frame.total_time
        for child in frame.children:
            self_time -= child.total_time
        frame.self_time = self_time
        self.aggregator.record(frame.fid, frame.total_time, frame.self_time)

        trace = self.trace
        if trace.end_time is None or frame.end_time > trace.end_time:
            trace.end_time = frame.end_time

        frame.set_completion(event.completion_type, event.value)

        self.logger.debug(f"退出帧 {frame.uid} {frame.name} (total={frame.total_time}, self={frame.self_time})")
        return frame
