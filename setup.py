from setuptools import setup, find_packages
import re

# Read version from withholdcheck/__init__.py
with open('withholdcheck/__init__.py') as f:
    version = re.search(r'^__version__ = ["\']([^"\']+)["\']', f.read(), re.MULTILINE).group(1)

setup(
    name='withhold-check',
    version=version,
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'withholdcheck': ['data/*.yaml'],
    },
    install_requires=[
        'PyYAML>=6.0',
        'click>=8.0',
        'pydantic>=2.0.0',
        'rich>=13.0',
        'fastapi>=0.110',
        'uvicorn>=0.27',
        'playwright>=1.40',
    ],
    extras_require={
        'test': [
            'pytest>=7.0',
            'httpx>=0.27',
        ],
    },
    entry_points={
        'console_scripts': [
            'withhold-check=withholdcheck.cli.__main__:main',
        ],
    },
    author='Personal',
    description='Cross-checked paycheck withholding estimates from two public calculators.',
    python_requires='>=3.10',
)
