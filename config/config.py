"""配置文件"""
from decimal import ROUND_HALF_EVEN

# 计算参数
CALCULATION_CONFIG = {
    "decimal_places": 7,  # 每次运算结果保留的小数位数
    "rounding": ROUND_HALF_EVEN,  # IEEE 754R 默认舍入模式
    "working_precision": 50,  # 中间运算的有效数字位数
    "arg_separator": ",",  # 函数参数分隔符
    "max_factorial": 20,  # 阶乘操作数上限
}

# 预设精度（对应 IEEE 754R Decimal32/64/128）
PRESET_CONFIG = {
    "decimal32": 7,
    "decimal64": 16,
    "decimal128": 34,
}

# 公式缓存参数
FORMULA_CACHE_CONFIG = {
    "cache_size": 1000,
}

# 日志参数
LOGGING_CONFIG = {
    "level": "INFO",
    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

# 演示入口默认值
DEMO_CONFIG = {
    "expression": "pow(π*r,2)",
    "variables": {"r": "12"},
}


# 验证配置
def validate_config():
    """验证配置的合理性"""
    assert CALCULATION_CONFIG["decimal_places"] >= 0, "小数位数不能为负"
    assert CALCULATION_CONFIG["working_precision"] > CALCULATION_CONFIG["decimal_places"], \
        "中间精度必须大于结果小数位数"
    assert len(CALCULATION_CONFIG["arg_separator"]) == 1, "参数分隔符必须是单个字符"
    assert 0 <= CALCULATION_CONFIG["max_factorial"] <= 1000, "阶乘上限超出范围"
    assert all(places > 0 for places in PRESET_CONFIG.values()), "预设精度必须为正"
    assert FORMULA_CACHE_CONFIG["cache_size"] > 0, "缓存大小必须为正"
    return True
