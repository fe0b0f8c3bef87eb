"""pkgwarm - 本地包仓库批量安装预热工具"""

__version__ = "0.1.0"
