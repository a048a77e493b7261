import re
from typing import Iterable, Optional
from urllib.parse import quote


_SLUG_INVALID = re.compile(r"[^a-z0-9\-_]+")


class Parse:

    """
    Parse 类。

    请求体和查询串的通用整理工具。
    """
    @staticmethod
    def remove_dict_none_value(data: dict) -> dict:
        """
        去掉值为 None 的键。

        Args:
            data: 原始字典。

        Returns:
            dict: 新字典。
        """
        return {k: v for k, v in data.items() if v is not None}

    @staticmethod
    def slugify(text: str) -> str:
        """
        把名称转换为 slug。

        小写, 去掉首尾空白, 空白替换为 ``-``, 删除 ``[a-z0-9-_]`` 以外的字符,
        最后合并连续的 ``-``。对已经是 slug 的字符串结果不变。

        Args:
            text: 显示名称。

        Returns:
            str: slug。
        """
        output = text.lower().strip()
        output = re.sub(r"\s+", "-", output)
        output = _SLUG_INVALID.sub("", output)
        while "--" in output:
            output = output.replace("--", "-")
        return output

    @staticmethod
    def build_query(args: Iterable[str]) -> str:
        """
        用 ``&`` 拼接 ``key=value`` 查询条件, 原样透传。

        Args:
            args: 查询条件。

        Returns:
            str: 查询串, 没有条件时为空字符串。
        """
        return "&".join(arg for arg in args if arg)

    @staticmethod
    def query_term(key: str, value: object) -> str:
        """
        生成单个 ``key=value`` 查询条件, value 做 URL 编码。

        Args:
            key: 过滤字段。
            value: 过滤值。

        Returns:
            str: 例如 ``name=My%20Site``。
        """
        return f"{key}={quote(str(value), safe='')}"

    @staticmethod
    def ip_from_cidr(cidr: str) -> str:
        """
        去掉 CIDR 中的掩码部分。

        Args:
            cidr: 例如 ``10.0.0.1/24``。

        Returns:
            str: 例如 ``10.0.0.1``。
        """
        return cidr.split("/")[0]

    @staticmethod
    def normalize_duplex(duplex: Optional[str]) -> Optional[str]:
        """
        把采集到的双工描述归一为 ``full``/``half``/``auto``。

        Args:
            duplex: 原始值, ``None`` 或 ``unknown`` 表示不更新。

        Returns:
            Optional[str]: 归一后的值, 不需要更新时为 ``None``。
        """
        if duplex is None or duplex == "unknown":
            return None
        if duplex.startswith("full"):
            return "full"
        if duplex.startswith("half"):
            return "half"
        return "auto"
