from setuptools import setup, find_packages

setup(
    name='rotcurve',
    version='1.0.0',
    description='Interpolation of time sequences of rotation quaternions for skeletal animation',
    packages=find_packages(include=['rotcurve', 'rotcurve.*']),
    python_requires='>=3.10',
    install_requires=['numpy'],
    extras_require={'test': ['pytest']},
)
