from setuptools import find_packages, setup

package_name = 'notify'

setup(
    name='agi-notify',
    version='0.1.0',
    packages=find_packages(include=[package_name, package_name + '.*']),
    python_requires='>=3.10',
    install_requires=[
        'setuptools',
        'PyYAML',
    ],
    zip_safe=True,
    maintainer='OppaAI',
    maintainer_email='oppa.ai.org@gmail.com',
    description='In-process notification and logging service',
    license='GPL-3.0-only',
    extras_require={
        'test': [
            'pytest',
        ],
    },
    entry_points={
        'console_scripts': [
            'notify-pipe = notify.cli:main'
        ],
    },
)
