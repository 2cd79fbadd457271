from setuptools import setup

setup(
    name='mircbc',
    version='1.0',
    description='Python 3 mircryption cbc (fish) message encryption',
    license='MIT',
    packages=['mircbc', 'mircbc.tests'],
    install_requires=[
        'pycryptodome>=3.9.9',
        'tabulate>=0.8.7',
    ],
    entry_points={
        'console_scripts': ['mircbc=mircbc.cli:main'],
    },
    zip_safe=False
)
