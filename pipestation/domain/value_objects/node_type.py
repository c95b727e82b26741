"""NodeType 枚举 - 节点类型标签

业务定义：
- NodeType 是节点配置联合类型的标签，决定 PipelineNode.config 使用哪个配置变体
- 节点按角色分为三类：输入（Input）、处理（Processing）、输出（Output）

设计原则：
- 继承 str 方便序列化与数据库存储
- 类型集合是封闭的：未知标签在构建节点时被拒绝
"""

from enum import Enum


class NodeCategory(str, Enum):
    """节点角色分类"""

    INPUT = "input"
    PROCESSING = "processing"
    OUTPUT = "output"


class NodeType(str, Enum):
    """节点类型枚举"""

    # Input
    FILE_WATCH = "file_watch"
    MANUAL_INPUT = "manual_input"
    WEBHOOK = "webhook"
    HTTP_REQUEST = "http_request"

    # Processing
    AI_PROCESSOR = "ai_processor"
    STRING_BUILDER = "string_builder"
    DEDUPLICATE = "deduplicate"
    FILTER = "filter"
    SWITCH = "switch"
    URL_BUILDER = "url_builder"
    UNTIL_LOOP = "until_loop"
    CONDITION = "condition"
    JOIN = "join"
    FORMAT = "format"
    LOOKUP = "lookup"
    INTERSECT = "intersect"
    LOOP = "loop"
    PARSE = "parse"
    REGEX_PATTERN = "regex_pattern"
    TRANSFORM = "transform"
    AGGREGATE = "aggregate"
    DISTINCT = "distinct"
    VALIDATE = "validate"
    SPLIT = "split"
    SORT = "sort"
    CUSTOM_CODE = "custom_code"
    UNION = "union"

    # Output
    HTTP_POST = "http_post"
    SEND_EMAIL = "send_email"
    DOWNLOAD = "download"
    FILE_APPEND = "file_append"

    @property
    def display_title(self) -> str:
        """节点的默认显示标题"""
        return NODE_TITLES[self]

    @property
    def category(self) -> NodeCategory:
        if self in _INPUT_TYPES:
            return NodeCategory.INPUT
        if self in _OUTPUT_TYPES:
            return NodeCategory.OUTPUT
        return NodeCategory.PROCESSING

    @classmethod
    def parse(cls, value: str) -> "NodeType | None":
        """按字符串查找类型，未知返回 None"""
        try:
            return cls(value)
        except ValueError:
            return None


_INPUT_TYPES = frozenset(
    {NodeType.FILE_WATCH, NodeType.MANUAL_INPUT, NodeType.WEBHOOK, NodeType.HTTP_REQUEST}
)
_OUTPUT_TYPES = frozenset(
    {NodeType.HTTP_POST, NodeType.SEND_EMAIL, NodeType.DOWNLOAD, NodeType.FILE_APPEND}
)

NODE_TITLES: dict[NodeType, str] = {
    NodeType.FILE_WATCH: "File Watcher",
    NodeType.MANUAL_INPUT: "Manual Input",
    NodeType.WEBHOOK: "Webhook",
    NodeType.HTTP_REQUEST: "HTTP Request",
    NodeType.AI_PROCESSOR: "AI Processor",
    NodeType.STRING_BUILDER: "String Builder",
    NodeType.DEDUPLICATE: "Deduplicate",
    NodeType.FILTER: "Filter",
    NodeType.SWITCH: "Switch",
    NodeType.URL_BUILDER: "URL Builder",
    NodeType.UNTIL_LOOP: "Until Loop",
    NodeType.CONDITION: "Condition",
    NodeType.JOIN: "Join",
    NodeType.FORMAT: "Format",
    NodeType.LOOKUP: "Lookup",
    NodeType.INTERSECT: "Intersect",
    NodeType.LOOP: "Loop",
    NodeType.PARSE: "Parse",
    NodeType.REGEX_PATTERN: "Regex Pattern",
    NodeType.TRANSFORM: "Transform",
    NodeType.AGGREGATE: "Aggregate",
    NodeType.DISTINCT: "Distinct",
    NodeType.VALIDATE: "Validate",
    NodeType.SPLIT: "Split",
    NodeType.SORT: "Sort",
    NodeType.CUSTOM_CODE: "Custom Code",
    NodeType.UNION: "Union",
    NodeType.HTTP_POST: "HTTP POST",
    NodeType.SEND_EMAIL: "Send Email",
    NodeType.DOWNLOAD: "Download",
    NodeType.FILE_APPEND: "File Append",
}
