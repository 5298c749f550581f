"""地域标准化

将自由文本的地域输入（省份简称、城市名、拼音等）映射为省级行政区标准名称。
无法识别或为空时返回 UNKNOWN_REGION。
"""
from typing import Dict, List, Optional, Tuple

UNKNOWN_REGION = "未知地区"

# 标准名称 -> 简称
PROVINCES: Dict[str, str] = {
    "北京市": "北京",
    "天津市": "天津",
    "上海市": "上海",
    "重庆市": "重庆",
    "河北省": "河北",
    "山西省": "山西",
    "辽宁省": "辽宁",
    "吉林省": "吉林",
    "黑龙江省": "黑龙江",
    "江苏省": "江苏",
    "浙江省": "浙江",
    "安徽省": "安徽",
    "福建省": "福建",
    "江西省": "江西",
    "山东省": "山东",
    "河南省": "河南",
    "湖北省": "湖北",
    "湖南省": "湖南",
    "广东省": "广东",
    "海南省": "海南",
    "四川省": "四川",
    "贵州省": "贵州",
    "云南省": "云南",
    "陕西省": "陕西",
    "甘肃省": "甘肃",
    "青海省": "青海",
    "台湾省": "台湾",
    "内蒙古自治区": "内蒙古",
    "广西壮族自治区": "广西",
    "西藏自治区": "西藏",
    "宁夏回族自治区": "宁夏",
    "新疆维吾尔自治区": "新疆",
    "香港特别行政区": "香港",
    "澳门特别行政区": "澳门",
}

# 单字简称，仅在整个输入等于简称时生效
ABBREVIATIONS: Dict[str, str] = {
    "京": "北京市", "津": "天津市", "沪": "上海市", "渝": "重庆市",
    "冀": "河北省", "晋": "山西省", "辽": "辽宁省", "吉": "吉林省",
    "黑": "黑龙江省", "苏": "江苏省", "浙": "浙江省", "皖": "安徽省",
    "闽": "福建省", "赣": "江西省", "鲁": "山东省", "豫": "河南省",
    "鄂": "湖北省", "湘": "湖南省", "粤": "广东省", "琼": "海南省",
    "川": "四川省", "蜀": "四川省", "黔": "贵州省", "滇": "云南省",
    "陕": "陕西省", "秦": "陕西省", "甘": "甘肃省", "陇": "甘肃省",
    "青": "青海省", "台": "台湾省", "蒙": "内蒙古自治区", "桂": "广西壮族自治区",
    "藏": "西藏自治区", "宁": "宁夏回族自治区", "新": "新疆维吾尔自治区",
    "港": "香港特别行政区", "澳": "澳门特别行政区",
}

PINYIN: Dict[str, str] = {
    "beijing": "北京市", "tianjin": "天津市", "shanghai": "上海市",
    "chongqing": "重庆市", "hebei": "河北省", "shanxi": "山西省",
    "liaoning": "辽宁省", "jilin": "吉林省", "heilongjiang": "黑龙江省",
    "jiangsu": "江苏省", "zhejiang": "浙江省", "anhui": "安徽省",
    "fujian": "福建省", "jiangxi": "江西省", "shandong": "山东省",
    "henan": "河南省", "hubei": "湖北省", "hunan": "湖南省",
    "guangdong": "广东省", "hainan": "海南省", "sichuan": "四川省",
    "guizhou": "贵州省", "yunnan": "云南省", "shaanxi": "陕西省",
    "gansu": "甘肃省", "qinghai": "青海省", "taiwan": "台湾省",
    "inner mongolia": "内蒙古自治区", "neimenggu": "内蒙古自治区",
    "guangxi": "广西壮族自治区", "tibet": "西藏自治区", "xizang": "西藏自治区",
    "ningxia": "宁夏回族自治区", "xinjiang": "新疆维吾尔自治区",
    "hong kong": "香港特别行政区", "hongkong": "香港特别行政区",
    "macau": "澳门特别行政区", "macao": "澳门特别行政区",
}

# 主要城市 -> 省级行政区
CITIES: Dict[str, str] = {
    "石家庄": "河北省", "唐山": "河北省", "保定": "河北省", "邯郸": "河北省",
    "太原": "山西省", "大同": "山西省",
    "沈阳": "辽宁省", "大连": "辽宁省", "鞍山": "辽宁省",
    "长春": "吉林省",
    "哈尔滨": "黑龙江省", "大庆": "黑龙江省", "齐齐哈尔": "黑龙江省",
    "南京": "江苏省", "苏州": "江苏省", "无锡": "江苏省", "常州": "江苏省",
    "南通": "江苏省", "徐州": "江苏省", "扬州": "江苏省", "镇江": "江苏省",
    "盐城": "江苏省", "连云港": "江苏省",
    "杭州": "浙江省", "宁波": "浙江省", "温州": "浙江省", "绍兴": "浙江省",
    "嘉兴": "浙江省", "金华": "浙江省", "义乌": "浙江省", "台州": "浙江省",
    "合肥": "安徽省", "芜湖": "安徽省",
    "福州": "福建省", "厦门": "福建省", "泉州": "福建省",
    "南昌": "江西省", "赣州": "江西省",
    "济南": "山东省", "青岛": "山东省", "烟台": "山东省", "潍坊": "山东省",
    "临沂": "山东省", "威海": "山东省",
    "郑州": "河南省", "洛阳": "河南省",
    "武汉": "湖北省", "宜昌": "湖北省", "襄阳": "湖北省",
    "长沙": "湖南省", "株洲": "湖南省",
    "广州": "广东省", "深圳": "广东省", "东莞": "广东省", "佛山": "广东省",
    "珠海": "广东省", "惠州": "广东省", "中山": "广东省", "汕头": "广东省",
    "海口": "海南省", "三亚": "海南省",
    "成都": "四川省", "绵阳": "四川省",
    "贵阳": "贵州省", "遵义": "贵州省",
    "昆明": "云南省", "大理": "云南省", "丽江": "云南省",
    "西安": "陕西省", "咸阳": "陕西省",
    "兰州": "甘肃省", "西宁": "青海省",
    "台北": "台湾省", "高雄": "台湾省",
    "呼和浩特": "内蒙古自治区", "包头": "内蒙古自治区", "鄂尔多斯": "内蒙古自治区",
    "南宁": "广西壮族自治区", "桂林": "广西壮族自治区", "柳州": "广西壮族自治区",
    "拉萨": "西藏自治区",
    "银川": "宁夏回族自治区",
    "乌鲁木齐": "新疆维吾尔自治区", "喀什": "新疆维吾尔自治区",
}


def _build_name_index() -> List[Tuple[str, str]]:
    """构建 (名称, 标准名称) 索引，按名称长度降序"""
    names: Dict[str, str] = {}
    for canonical, short in PROVINCES.items():
        names[canonical] = canonical
        names[short] = canonical
    names.update(CITIES)
    return sorted(names.items(), key=lambda item: len(item[0]), reverse=True)


_NAME_INDEX = _build_name_index()


def is_canonical_region(region: str) -> bool:
    """是否为省级行政区标准名称"""
    return region in PROVINCES


def normalize_to_province(region: Optional[str]) -> str:
    """
    将地域输入标准化为省级行政区名称

    匹配顺序：标准名称 > 单字简称/拼音（整词） > 文本中出现的省名或城市名
    （最早出现者优先，位置相同时取较长的名称）。

    Args:
        region: 任意地域文本，可为空

    Returns:
        省级行政区标准名称，无法识别时返回 UNKNOWN_REGION
    """
    text = (region or "").strip()
    if not text:
        return UNKNOWN_REGION

    if text in PROVINCES:
        return text
    if text in ABBREVIATIONS:
        return ABBREVIATIONS[text]

    lowered = " ".join(text.lower().split())
    if lowered in PINYIN:
        return PINYIN[lowered]

    best: Optional[Tuple[int, int, str]] = None
    for name, canonical in _NAME_INDEX:
        pos = text.find(name)
        if pos < 0:
            continue
        candidate = (pos, -len(name), canonical)
        if best is None or candidate < best:
            best = candidate

    if best is not None:
        return best[2]
    return UNKNOWN_REGION
