import logging
from collections import OrderedDict
from decimal import Decimal
from typing import Dict, Optional

import numpy as np
import pandas as pd

from config.config import FORMULA_CACHE_CONFIG
from rpn import CalculationContext, CalculatorError, InfixConverter, RPNEvaluator

logger = logging.getLogger(__name__)


class FormulaEvaluator:
    """带转换缓存的公式求值器，支持按 DataFrame 逐行求值"""

    def __init__(self, context: Optional[CalculationContext] = None, cache_size=None):
        self.context = context if context is not None else CalculationContext.new_instance()
        self.converter = InfixConverter(self.context)
        # 使用有限大小的OrderedDict实现LRU缓存
        self.cache_size = cache_size or FORMULA_CACHE_CONFIG["cache_size"]
        self._postfix_cache = OrderedDict()
        self._cache_hits = 0
        self._cache_misses = 0

    def _manage_cache(self):
        """管理缓存大小"""
        while len(self._postfix_cache) > self.cache_size:
            # 删除最旧的条目
            self._postfix_cache.popitem(last=False)

    def clear_cache(self):
        """清空缓存（供外部调用）"""
        self._postfix_cache.clear()
        logger.info(f"Cache cleared. Hits: {self._cache_hits}, Misses: {self._cache_misses}")
        self._cache_hits = 0
        self._cache_misses = 0

    @property
    def cache_info(self):
        return {"hits": self._cache_hits, "misses": self._cache_misses, "size": len(self._postfix_cache)}

    def to_postfix(self, formula: str, context: Optional[CalculationContext] = None) -> str:
        """
        中缀转后缀，结果按（公式, 上下文名称版本, 变量名集合）缓存
        版本号全局唯一：名称集合变化（新变量、新函数等）后旧的转换结果不再命中，
        各自注册过名称的两个上下文也不会共用缓存条目
        """
        context = context if context is not None else self.context
        cache_key = (formula, context.revision, frozenset(context.variables))

        if cache_key in self._postfix_cache:
            # 移到末尾（最近使用）
            self._postfix_cache.move_to_end(cache_key)
            self._cache_hits += 1
            logger.debug(f"Cache hit for formula: {formula[:50]}")
            return self._postfix_cache[cache_key]

        self._cache_misses += 1
        converter = self.converter if context is self.context else InfixConverter(context)
        postfix = converter.convert(formula)
        self._postfix_cache[cache_key] = postfix
        self._manage_cache()
        return postfix

    def evaluate(self, formula: str, variables: Optional[Dict] = None, infix=True) -> Decimal:
        """
        Args:
            formula: 中缀公式，infix=False 时为后缀公式
            variables: 仅对本次求值生效的变量，不修改共享上下文
            infix: formula 是否为中缀
        Returns:
            求值结果
        """
        context = self.context
        if variables:
            context = self.context.copy()
            for name, value in variables.items():
                context.set_variable(name, value)

        postfix = self.to_postfix(formula, context) if infix else formula
        return RPNEvaluator.evaluate(postfix, context)

    def evaluate_frame(self, formula: str, frame: pd.DataFrame, infix=True, errors="raise") -> pd.Series:
        """
        逐行求值，每一列作为同名变量
        Args:
            formula: 公式
            frame: 变量数据，列名即变量名
            infix: formula 是否为中缀
            errors: "raise" 遇错即抛出；"coerce" 出错的行记为 NaN
        Returns:
            与 frame 同索引的 Series（object 类型，元素为 Decimal 或 NaN）
        """
        if errors not in ("raise", "coerce"):
            raise ValueError(f"errors must be 'raise' or 'coerce', got {errors!r}")

        # 只复制一次上下文，之后逐行覆盖变量值
        scoped = self.context.copy()
        columns = [str(col) for col in frame.columns]
        postfix = None
        results = []
        failed = 0

        for row in frame.itertuples(index=False, name=None):
            try:
                for name, value in zip(columns, row):
                    scoped.set_variable(name, value)
                if postfix is None:
                    postfix = self.to_postfix(formula, scoped) if infix else formula
                results.append(RPNEvaluator.evaluate(postfix, scoped))
            except (CalculatorError, ValueError, TypeError) as e:
                if errors == "raise":
                    raise
                failed += 1
                logger.debug(f"Row evaluation failed for '{formula[:50]}': {e}")
                results.append(np.nan)

        if failed:
            logger.warning(f"{failed}/{len(frame)} rows failed for formula '{formula[:50]}'")
        return pd.Series(results, index=frame.index, dtype=object, name=formula)
