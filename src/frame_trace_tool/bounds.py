# -*- coding: utf-8 -*-
"""
视口模型：在 [0, 1] 归一化区间上表示当前选中的时间窗口
"""

import logging
import math
from typing import Optional

from .events import EventEmitter, CHANGED

logger = logging.getLogger(__name__)

# 小于该时长的窗口不再继续放大
MINIMUM_INTERVAL_TIME = 3
ZOOM_DIVISOR = 500
PAN_DIVISOR = 1000


def _clamp(value: float) -> float:
    return max(min(value, 1.0), 0.0)


class TraceBounds(EventEmitter):
    """
    追踪时间轴上的缩放/平移窗口

    left/right 为归一化位置，始终满足 0 <= left <= right <= 1。
    每次变化发出 changed 事件，参数为原因 ("zoom"、"pan" 或 None)。

    Args:
        total_time: 追踪总时长
        minimum_interval_time: 允许的最小窗口时长
    """

    def __init__(self, total_time: float = 0.0, minimum_interval_time: float = MINIMUM_INTERVAL_TIME):
        super().__init__()
        self.minimum_interval_time = minimum_interval_time
        self._total_time = total_time
        self._left = 0.0
        self._right = 1.0

    def __repr__(self):
        return f"TraceBounds(left={self._left}, right={self._right}, total_time={self._total_time})"

    def set_trace(self, trace):
        """绑定追踪，窗口重置为整个时间范围"""
        self.set_total_time(trace.total_time)

    def set_total_time(self, total_time: float):
        self._total_time = total_time
        self._left = 0.0
        self._right = 1.0

    @property
    def total_time(self) -> float:
        return self._total_time

    @property
    def minimum_interval_width(self) -> float:
        if self._total_time <= 0:
            return 1.0
        return min(self.minimum_interval_time / self._total_time, 1.0)

    @property
    def left(self) -> float:
        return self._left

    @left.setter
    def left(self, percent: float):
        self.set_bounds(percent, self._right)

    @property
    def right(self) -> float:
        return self._right

    @right.setter
    def right(self, percent: float):
        self.set_bounds(self._left, percent)

    @property
    def interval_width(self) -> float:
        return self._right - self._left

    @property
    def center(self) -> float:
        return self._left + self.interval_width / 2

    @center.setter
    def center(self, percent: float):
        half_width = max(self.interval_width, self.minimum_interval_width) / 2
        if percent < half_width:
            percent = half_width
        elif percent > 1.0 - half_width:
            percent = 1.0 - half_width
        self.set_bounds(percent - half_width, percent + half_width)

    @property
    def left_time(self) -> float:
        return self._total_time * self._left

    @left_time.setter
    def left_time(self, time: float):
        self.set_bounds(self._percent_of_total(time), self._right)

    @property
    def right_time(self) -> float:
        return self._total_time * self._right

    @right_time.setter
    def right_time(self, time: float):
        self.set_bounds(self._left, self._percent_of_total(time))

    @property
    def interval_time(self) -> float:
        return self.right_time - self.left_time

    def _percent_of_total(self, time: float) -> float:
        if self._total_time <= 0:
            return 0.0
        return time / self._total_time

    def set_bounds(self, left: Optional[float], right: Optional[float], why: Optional[str] = None):
        """
        设置窗口边界

        Args:
            left: 左边界，None 或 NaN 视为 0
            right: 右边界，None 或 NaN 视为 1
            why: 变化原因，随 changed 事件传给监听器
        """
        if left is None or math.isnan(left):
            left = 0.0
        if right is None or math.isnan(right):
            right = 1.0
        left = _clamp(left)
        right = _clamp(right)
        if left > right:
            left, right = right, left
        self._left = left
        self._right = right
        logger.debug(f"窗口变化 [{left}, {right}] ({why})")
        self.emit(CHANGED, why)

    def percentage_from_time(self, time: float, in_bounds: bool = False) -> float:
        """
        时间转换为归一化位置

        Args:
            time: 绝对时间
            in_bounds: True 时相对于当前窗口，否则相对于整个追踪
        """
        if in_bounds:
            interval_time = self.interval_time
            if interval_time == 0:
                return 0.0
            return (time - self.left_time) / interval_time
        return self._percent_of_total(time)

    def time_from_percentage(self, percent: float, in_bounds: bool = False) -> float:
        """percentage_from_time 的逆运算"""
        if in_bounds:
            return self.left_time + percent * self.interval_time
        return percent * self._total_time

    def zoom(self, amount: float, center_percent: float = 0.5):
        """
        缩放窗口

        Args:
            amount: 缩放量，负数放大，按 amount/500 的窗口宽度变化
            center_percent: 缩放中心在窗口中的相对位置，该点保持不动
        """
        delta = self.interval_width * amount / ZOOM_DIVISOR
        min_width = self.minimum_interval_width
        if self.interval_width + 2 * delta < min_width:
            center = self.center
            self.set_bounds(center - min_width / 2, center + min_width / 2, 'zoom')
            return

        left_delta = delta * center_percent
        right_delta = delta * (1.0 - center_percent)
        self.set_bounds(self._left - left_delta, self._right + right_delta, 'zoom')

    def pan(self, amount: float):
        """按 amount/1000 的窗口宽度平移"""
        self.pan_by_percent(amount / PAN_DIVISOR)

    def pan_by_percent(self, value: float):
        pan = self.interval_width * value
        room_to_pan = -self._left if value < 0 else 1.0 - self._right
        if abs(pan) > abs(room_to_pan):
            pan = room_to_pan
        self.set_bounds(self._left + pan, self._right + pan, 'pan')
