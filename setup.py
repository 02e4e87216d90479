from setuptools import setup, find_packages

setup(
    name='mobiusmol',
    version='0.1.0',
    description='Conformal (Möbius) scaling transforms for exploring molecules, curves and meshes.',
    long_description='Conformal (Möbius) scaling transforms for exploring molecules, curves and meshes.',
    long_description_content_type='text/markdown',
    packages=find_packages(exclude=['tests', 'tests.*']),
    include_package_data=True,
    package_data={
        'mobiusmol': [
            'resources/mobius_viewer.html',
        ],
    },
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.9',
    install_requires=[
        'numpy',
        'ipython',
        'gemmi>=0.7',
    ],
    extras_require={
        'test': ['pytest'],
        'docs': ['sphinx'],
    },
)
