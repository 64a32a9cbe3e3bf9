"""并发执行器模块。

按输入顺序收集结果的线程池执行器，单个任务失败不影响其他任务。
"""

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from typing import Generic, TypeVar

from ..exceptions import ErrorHandler
from ..models.processing_result import BatchItemResult


logger = logging.getLogger(__name__)

TaskT = TypeVar("TaskT")


class ConcurrentExecutor(Generic[TaskT]):
    """通用并发执行器

    每个任务独占自己的图像缓冲区，执行器只负责调度与按序汇总。
    """

    def __init__(self, max_workers: int = 4):
        """初始化并发执行器

        Args:
            max_workers: 最大并发数，1 表示顺序执行
        """
        self.max_workers = max_workers

    def execute_tasks(
        self,
        tasks: Sequence[TaskT],
        task_function: Callable[[int, TaskT], BatchItemResult],
        describe: Callable[[TaskT], str] = str,
    ) -> list[BatchItemResult]:
        """执行任务并按输入顺序返回结果

        Args:
            tasks: 任务列表
            task_function: 任务函数，参数为 (序号, 任务)
            describe: 任务描述函数，用于错误结果的源名称

        Returns:
            list[BatchItemResult]: 与输入顺序一致的结果
        """
        if not tasks:
            return []

        if self.max_workers <= 1 or len(tasks) == 1:
            return [
                self._run_one(index, task, task_function, describe)
                for index, task in enumerate(tasks)
            ]

        results: list[BatchItemResult | None] = [None] * len(tasks)
        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(tasks)),
            thread_name_prefix="orient-worker",
        ) as executor:
            future_to_index: dict[Future[BatchItemResult], int] = {
                executor.submit(task_function, index, task): index
                for index, task in enumerate(tasks)
            }
            self._collect_results(future_to_index, tasks, describe, results)

        return [r for r in results if r is not None]

    def _run_one(
        self,
        index: int,
        task: TaskT,
        task_function: Callable[[int, TaskT], BatchItemResult],
        describe: Callable[[TaskT], str],
    ) -> BatchItemResult:
        try:
            return task_function(index, task)
        except Exception as e:
            return ErrorHandler.handle_item_error(e, index, describe(task))

    def _collect_results(
        self,
        future_to_index: dict[Future[BatchItemResult], int],
        tasks: Sequence[TaskT],
        describe: Callable[[TaskT], str],
        results: list[BatchItemResult | None],
    ) -> None:
        """收集任务执行结果，写回对应序号"""
        for future in as_completed(future_to_index):
            index = future_to_index[future]
            try:
                result = future.result()
            except Exception as e:
                result = ErrorHandler.handle_item_error(
                    e, index, describe(tasks[index]), "并发任务处理"
                )

            if result.success:
                logger.debug(f"处理成功: {result.source_name}")
            else:
                logger.warning(f"处理失败: {result.source_name} - {result.error}")
            results[index] = result
