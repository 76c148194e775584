"""
Query normalization tables

Exact-match lookups applied to parsed intents. Values without an entry pass
through unchanged; there is no fuzzy or partial matching.
"""

PRODUCT_TYPE_SYNONYMS: dict[str, str] = {
    "牛仔服": "牛仔裤",
    "丹宁裤": "牛仔裤",
    "T恤衫": "T恤",
    "短袖": "T恤",
    "运动鞋": "鞋子",
    "跑步鞋": "鞋子",
    "球鞋": "鞋子",
    "手机": "智能手机",
    "电话": "智能手机",
}

COLOR_NORMALIZATION: dict[str, str] = {
    "红": "红色",
    "蓝": "蓝色",
    "黑": "黑色",
    "白": "白色",
    "绿": "绿色",
    "黄": "黄色",
    "紫": "紫色",
    "粉": "粉色",
    "灰": "灰色",
    "棕": "棕色",
    "深蓝": "深蓝色",
    "浅蓝": "浅蓝色",
    "天蓝": "天蓝色",
    "海蓝": "海蓝色",
}

SIZE_NORMALIZATION: dict[str, str] = {
    "小": "S",
    "中": "M",
    "大": "L",
    "特大": "XL",
    "超大": "XXL",
    "小号": "S",
    "中号": "M",
    "大号": "L",
    "特大号": "XL",
}


def normalize(value: str | None, table: dict[str, str]) -> str | None:
    if value is None:
        return None
    return table.get(value, value)
