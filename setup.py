from setuptools import find_packages, setup

package_dir = {"": "code"}

setup(
    name='indoor-nav',
    version='0.1.0',
    package_dir=package_dir,
    packages=find_packages(where="code"),
    package_data={'indoor_nav.cfg': ['*.yaml']},
    python_requires='>=3.8',
    install_requires=[
        'numpy',
        'pandas',
        'igraph',
        'joblib',
        'networkx',
        'pyyaml'
    ],
    extras_require={
        'test': ['pytest']
    },
    entry_points={
        'console_scripts': ['indoor-nav=indoor_nav.cli:main']
    }
)
