from setuptools import setup, find_packages

setup(
    name='dft_profiles',               # Package name
    version='0.1.0',                   # Version number
    author='vikkivarma16',
    author_email='vikkivarma16@gmail.com',
    description="Classical density functional profiles of spheres and chain molecules in planar confinement.",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[                 # Dependencies your package needs
        'numpy',
        'scipy',
        'matplotlib',
        'sympy',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'dft-profiles=dft_profiles.executor_dft_main:main',
        ],
    },
    python_requires='>=3.10',          # Minimum Python version
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
