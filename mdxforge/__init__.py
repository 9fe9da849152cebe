"""
MdxForge - 把 AI 生成的 API 文档保存为可追溯版本的 MDX 文件集合。
"""

__version__ = "0.1.0"
