from __future__ import annotations

"""关键点转发：将每帧的关键点记录 POST 到用户配置的 HTTP 接口。

说明：
    转发是“发出即忘”的：失败只打印一行提示，不重试，也不会中断帧处理循环。
    接口地址通过 RelayConfig 显式传入。后台发送同一时间最多一个请求在途，忙时丢帧。
"""

import json
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable

import httpx

from ..types import Pose


@dataclass(frozen=True)
class RelayConfig:
    """转发配置。

    字段说明：
        endpoint: 接收端 URL，例如 "http://192.168.3.121:3002/api/detectionpose"；
                  None 或空字符串表示不转发。
        timeout: 单次请求超时（秒），>0。
    """
    endpoint: str | None = None
    timeout: float = 2.0

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint and self.endpoint.strip())


def landmark_records(poses: Iterable[Pose] | None) -> list[dict]:
    """将所有姿态的关键点展开为扁平记录列表（保持顺序）。"""
    if not poses:
        return []
    return [landmark.to_record() for pose in poses for landmark in pose.landmarks]


class LandmarkRelay:
    def __init__(self, config: RelayConfig, client: httpx.Client | None = None) -> None:
        """初始化转发器。

        参数:
            config: 转发配置。
            client: 可选的 httpx 客户端（测试时可注入 MockTransport）。
        """
        self._config = config
        self._client = client
        self._owns_client = client is None
        self._executor: ThreadPoolExecutor | None = None
        self._in_flight: Future | None = None

    @property
    def config(self) -> RelayConfig:
        return self._config

    def send(self, poses: Iterable[Pose] | None) -> bool:
        """同步发送一帧的关键点记录。

        返回:
            bool: 请求成功（2xx）返回 True；未配置、无记录或请求失败返回 False。
        """
        if not self._config.enabled:
            return False
        records = landmark_records(poses)
        if not records:
            return False
        return self._post(self._get_client(), records)

    def submit(self, poses: Iterable[Pose] | None) -> Future | None:
        """在后台线程发送，不阻塞调用方。

        同一时间最多只有一个请求在途；上一个请求未完成时本帧直接丢弃。

        返回:
            Future | None: 已提交的发送任务；未配置、无记录或本帧被丢弃时返回 None。
        """
        if not self._config.enabled:
            return None
        if self._in_flight is not None and not self._in_flight.done():
            return None
        # 在调用线程中先展开，避免后台线程读取到后续帧的数据
        records = landmark_records(poses)
        if not records:
            return None
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="relay")
        self._in_flight = self._executor.submit(self._post, self._get_client(), records)
        return self._in_flight

    def close(self) -> None:
        """关闭转发器，不等待在途请求完成。"""
        in_flight = self._in_flight
        self._in_flight = None
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None
        if self._owns_client and self._client is not None:
            client = self._client
            self._client = None
            if in_flight is not None and not in_flight.done():
                # 在途请求结束后再关闭连接
                in_flight.add_done_callback(lambda _: client.close())
            else:
                client.close()

    def __enter__(self) -> "LandmarkRelay":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _post(self, client: httpx.Client, records: list[dict]) -> bool:
        # poseData 的每一项是一条记录的 JSON 字符串
        payload = {"poseData": [json.dumps(record, ensure_ascii=False) for record in records]}
        try:
            response = client.post(
                self._config.endpoint.strip(),
                json=payload,
                headers={"Accept": "application/json"},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            print(f"Relay to {self._config.endpoint} failed: {exc}")
            return False
        return True

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self._config.timeout)
        return self._client
