# setup.py
from setuptools import setup, find_packages

setup(
    name="mdxforge",
    version="0.1.0",
    description="Versioned MDX documentation sets with an AI chat patch protocol, composed of the mdxforge tool and the snapstore library.",
    author="MdxForge Maintainers",
    # 两个顶级包：mdxforge (工具 + 核心) 与 snapstore (快照存储库)
    packages=find_packages(include=['mdxforge', 'mdxforge.*', 'snapstore', 'snapstore.*']),
    include_package_data=True,
    package_data={
        'mdxforge': ['templates/prompts/*.j2', 'templates/config/*.j2'],
    },
    install_requires=[
        "click>=8.0",
        "pyyaml",
        "jinja2",
        "rich",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        'console_scripts': [
            'mdxforge = mdxforge.cli:cli',
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Documentation",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
)
