"""inkies 配置

配置分为以下几类：
- 编译器配置：inklecate 查找路径、超时
- 预览配置：防抖时间、inkjs 运行时
- 导出配置：默认文件名
- Web 配置：监听地址
- 日志/指标配置
"""

import os
from pathlib import Path

_PACKAGE_DIR = Path(__file__).parent

# === 编译器配置 ===
COMPILER_NAME = "inklecate"
# 随应用分发的编译器（优先），可通过环境变量覆盖
BUNDLED_COMPILER_PATH = os.environ.get(
    "INKIES_INKLECATE", str(_PACKAGE_DIR / "bin" / COMPILER_NAME)
)
# 系统安装路径（按顺序查找，首个命中即返回）
COMPILER_SEARCH_PATHS = [
    "/opt/homebrew/bin/inklecate",
    "/usr/local/bin/inklecate",
    "/usr/bin/inklecate",
]
# 编译超时（秒），0 表示不限制
COMPILE_TIMEOUT_SECONDS = float(os.environ.get("INKIES_COMPILE_TIMEOUT", "30"))

# 临时文件
TEMP_DIR_PREFIX = "inkies-"
TEMP_SOURCE_NAME = "story.ink"
TEMP_OUTPUT_NAME = "story.json"

# === 预览配置 ===
DEBOUNCE_SECONDS = 0.6  # 输入静默多久后才编译（秒）
COMPILED_MARKER = "{"  # 已编译产物（JSON）的起始字符
COMPILER_ERROR_PREFIX = "COMPILER_ERROR:"  # 传给 harness 的错误前缀

# inkjs 运行时：本地文件优先，找不到则使用 CDN
INKJS_PATH = os.environ.get("INKIES_INKJS_PATH", str(_PACKAGE_DIR / "static" / "ink.min.js"))
INKJS_CDN_URL = "https://unpkg.com/inkjs/dist/ink.js"

TEMPLATES_DIR = _PACKAGE_DIR / "templates"
PREVIEW_TEMPLATE = "preview.html"
PREVIEW_TITLE = "Ink Preview"

# === 导出配置 ===
EXPORT_SOURCE_FILENAME = "Story.ink"
EXPORT_COMPILED_FILENAME = "story.json"
EXPORT_WEB_FILENAME = "index.html"
EXPORT_ERROR_TITLE = "Compiler Error"

# === Web 配置 ===
HOST = os.environ.get("INKIES_HOST", "127.0.0.1")
PORT = int(os.environ.get("INKIES_PORT", "8765"))

# === 日志配置 ===
LOG_LEVEL = os.environ.get("INKIES_LOG_LEVEL", "INFO")  # 日志级别
LOG_FORMAT = "[%(name)s] %(message)s"
LOG_MAX_SOURCE_LEN = 80  # 日志中源码预览截断长度

# === 指标配置 ===
METRICS_ENABLED = True  # 是否启用指标收集
