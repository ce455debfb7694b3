"""
SlimDb - Thin database access layer

Fluent query builder, schema introspection and a micro ORM
on top of any DB-API 2.0 connection (SQLite, MySQL).
"""

from setuptools import setup, find_packages
import os

# Read README for long description
def read_long_description():
    readme_path = os.path.join(os.path.dirname(__file__), 'README.md')
    if os.path.exists(readme_path):
        with open(readme_path, 'r', encoding='utf-8') as f:
            return f.read()
    return ""

# Define optional dependencies
extras_require = {
    # Standard library engines (no extra install needed)
    'sqlite': [],

    # Engines requiring external dependencies
    'mysql': [
        'PyMySQL>=1.0.0',
    ],

    # Test dependencies
    'test': [
        'pytest>=7.0.0',
    ],

    # Development dependencies
    'dev': [
        'mypy>=0.950',
        'build>=0.7.0',
        'twine>=4.0.0',
    ],
}

# All engines
extras_require['all'] = (
    extras_require['mysql']
)

# Full development environment
extras_require['full'] = (
    extras_require['all'] +
    extras_require['test'] +
    extras_require['dev']
)

setup(
    name="slimdb",
    version="0.1.0",
    author="",
    author_email="",
    description="Thin database access layer - fluent query builder, schema introspection and micro ORM over DB-API",
    long_description=read_long_description(),
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=['tests', 'tests.*']),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Database",
        "Topic :: Database :: Front-Ends",
        "Topic :: Software Development :: Libraries :: Python Modules",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Typing :: Typed",
    ],
    # dataclass(slots=True) 需要 3.10+
    python_requires=">=3.10",

    # Core dependencies (SQLite via stdlib sqlite3)
    install_requires=[],

    # Optional dependencies
    extras_require=extras_require,

    keywords="database orm query-builder sqlite mysql dbapi micro-orm",
)
