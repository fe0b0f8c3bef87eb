"""核心引擎：版本过滤、命令打包、批次调度、命令执行"""
