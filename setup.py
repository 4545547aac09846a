from setuptools import setup, find_packages
import re

# Read version from taxcalc/__init__.py
with open('taxcalc/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='tax-calc',
    version=version,
    packages=find_packages(include=['taxcalc', 'taxcalc.*']),
    package_data={
        'taxcalc': ['tax-rules/*.yaml'],
    },
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
    ],
    extras_require={
        'api': [
            'fastapi>=0.100.0',
            'uvicorn>=0.23.0',
            'python-multipart>=0.0.6',
        ],
        'mcp': [
            'mcp[cli]>=1.0.0,<2',
        ],
        'test': [
            'pytest>=7.0',
            'httpx>=0.24.0',
            'fastapi>=0.100.0',
            'python-multipart>=0.0.6',
            'mcp[cli]>=1.0.0,<2',
        ],
    },
    entry_points={
        'console_scripts': [
            'tax-calc=taxcalc.cli.__main__:main',
            'tax-calc-mcp=taxcalc.mcp.server:run_server',
        ],
    },
    author='Personal',
    description='Personal income tax computation for single records and CSV batches.',
    python_requires='>=3.10',
)
