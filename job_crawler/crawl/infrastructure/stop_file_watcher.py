import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional, Union

logger = logging.getLogger('domain.run_lifecycle')


class StopFileWatcher:
    """
    停止文件监视器
    启动时写入空文件，之后定期检查；文件内容为 "stop"（不区分大小写）时触发停止回调，只触发一次。
    """

    def __init__(self, stop_file: Union[str, Path], on_stop: Callable[[], None], interval: float = 2.0):
        self._stop_file = Path(stop_file)
        self._on_stop = on_stop
        self._interval = interval
        self._task: Optional[asyncio.Task] = None
        self._triggered = False

    def start(self) -> None:
        self._stop_file.write_text('', encoding='utf-8')
        self._task = asyncio.ensure_future(self._watch())

    async def close(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    @property
    def triggered(self) -> bool:
        return self._triggered

    def check(self) -> bool:
        """检查一次停止文件，检测到 stop 时调用回调"""
        if self._triggered or not self._stop_file.exists():
            return self._triggered

        content = self._stop_file.read_text(encoding='utf-8').strip()
        if content.lower() == 'stop':
            logger.info(f'Detected "stop" in {self._stop_file}. Stopping crawler...')
            self._triggered = True
            self._on_stop()
        return self._triggered

    async def _watch(self) -> None:
        while not self._triggered:
            await asyncio.sleep(self._interval)
            try:
                self.check()
            except OSError as e:
                logging.getLogger('infrastructure.error').warning(f"读取停止文件失败: {e}")
