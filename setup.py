from pathlib import Path

from setuptools import setup

install_requires = [
    "trio>=0.22.0",
]


setup(
    name='curious-presence',
    version='0.1.0',
    packages=['curious_presence', 'curious_presence.ipc', 'curious_presence.dataclasses'],
    license='LGPLv3',
    description='A Discord Rich Presence client over local IPC',
    long_description=Path(__file__).with_name("README.rst").read_text(encoding="utf-8"),
    python_requires=">=3.8",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Framework :: Trio",
        "Development Status :: 4 - Beta"
    ],
    install_requires=install_requires,
    extras_require={
        "tests": [
            "pytest>=7.0",
        ],
    },
)
