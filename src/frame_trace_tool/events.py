# -*- coding: utf-8 -*-
"""
同步的事件监听机制
"""

from collections import defaultdict
from typing import Any, Callable, Dict, List


ENTERED_FRAME = 'entered_frame'
EXITED_FRAME = 'exited_frame'
FINISHED = 'finished'
CHANGED = 'changed'

Listener = Callable[..., Any]


class EventEmitter:
    """按注册顺序同步调用监听器"""

    def __init__(self):
        self._listeners: Dict[str, List[Listener]] = defaultdict(list)

    def on(self, event: str, callback: Listener) -> Listener:
        """注册监听器，返回 callback 以便之后取消"""
        self._listeners[event].append(callback)
        return callback

    def off(self, event: str, callback: Listener) -> bool:
        """取消监听器，返回是否找到"""
        listeners = self._listeners.get(event)
        if not listeners or callback not in listeners:
            return False
        listeners.remove(callback)
        return True

    def emit(self, event: str, *args: Any):
        # 复制一份，监听器可能在回调中取消自己
        for callback in list(self._listeners.get(event, ())):
            callback(*args)

    def listener_count(self, event: str) -> int:
        return len(self._listeners.get(event, ()))
