# -*- coding: utf-8 -*-
"""
函数聚合统计：将 name + location 映射为稳定的函数 ID，并累计调用次数和耗时
"""

import json
import logging
from typing import Any, Dict, Iterator, List, Optional, Sequence

from .models import FunctionRecord, MalformedEventError, TraceFinishedError

logger = logging.getLogger(__name__)


def location_to_string(location: Any, name: Optional[str]) -> str:
    """
    生成函数的身份标识

    匿名内部函数会报告与外层函数相同的位置，因此把函数名也拼进去。

    Args:
        location: 源码位置，任意可 JSON 序列化的结构
        name: 函数名

    Returns:
        str: 身份标识
    """
    return (name or '') + json.dumps(location, sort_keys=True, default=str)


class FunctionAggregator:
    """单个 Trace 拥有的函数聚合表"""

    def __init__(self):
        self.records: List[FunctionRecord] = []
        self._function_ids: Optional[Dict[str, int]] = {}

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[FunctionRecord]:
        return iter(self.records)

    @property
    def frozen(self) -> bool:
        return self._function_ids is None

    def get(self, fid: int) -> FunctionRecord:
        return self.records[fid]

    def resolve(self, name: str, location: Any, parameter_names: Sequence[str]) -> int:
        """
        获取函数 ID，第一次见到时创建计数为 0 的聚合记录

        Args:
            name: 函数名
            location: 源码位置
            parameter_names: 参数名列表

        Returns:
            int: 函数 ID
        """
        if self._function_ids is None:
            raise TraceFinishedError("函数聚合表已冻结")

        try:
            key = location_to_string(location, name)
        except TypeError as e:
            raise MalformedEventError(f"无法生成函数标识: {location!r}") from e
        fid = self._function_ids.get(key)
        if fid is None:
            fid = len(self.records)
            self._function_ids[key] = fid
            self.records.append(FunctionRecord(
                id=fid,
                name=name,
                location=location,
                parameter_names=list(parameter_names or []),
            ))
            logger.debug(f"新函数 {fid}: {key}")
        return fid

    def count_call(self, fid: int) -> FunctionRecord:
        record = self.records[fid]
        record.count += 1
        return record

    def record(self, fid: int, total_time: float, self_time: float) -> FunctionRecord:
        """累计一次退出的耗时，每个帧退出时调用一次"""
        record = self.records[fid]
        if record.total_time is None:
            record.total_time = 0
            record.self_time = 0
        record.total_time += total_time
        record.self_time += self_time
        return record

    def freeze(self):
        """追踪结束后丢弃身份索引"""
        self._function_ids = None

    def to_list(self) -> List[Dict[str, Any]]:
        return [record.to_dict() for record in self.records]
