import os, sys
from setuptools import setup, find_namespace_packages
from setuptools.command.build_py import build_py as _build

CLASSIFIERS = [
    'Operating System :: POSIX',
    'Operating System :: MacOS :: MacOS X',
    'Intended Audience :: Developers',
    'Programming Language :: Python',
    'Programming Language :: Python :: 3',
    'Topic :: Internet :: WWW/HTTP :: WSGI',
    'Topic :: Software Development :: Libraries :: Application Frameworks'
]

pkgroot = os.path.dirname(os.path.abspath(__file__))
srcdir = os.path.join(pkgroot, 'python')

def get_version():
    out = "dev"
    versfile = os.path.join(pkgroot, 'VERSION')
    if os.path.exists(versfile):
        with open(versfile) as fd:
            parts = fd.readline().split()
        if len(parts) > 0:
            out = parts[-1]
    return out

def write_version_mod(version):
    versmodf = os.path.join(srcdir, "wds", "version.py")
    with open(versmodf, 'w') as fd:
        fd.write('"""')
        fd.write("""
An identification of the package version.  Note that this module file gets
(over-) written by the build process.
""")
        fd.write('"""\n\n')
        fd.write('__version__ = "')
        fd.write(version)
        fd.write('"\n')

class build(_build):

    def run(self):
        write_version_mod(self.distribution.metadata.version)
        _build.run(self)

setup(name='wds',
      version=get_version(),
      description="wds: declarative configuration, inheritance and diagnostics for web data services",
      author="Web Data Service Developers",
      url='https://pypi.org/project/wds/',
      package_dir={'': 'python'},
      packages=find_namespace_packages('python', include=['wds', 'wds.*']),
      python_requires='>=3.8',
      install_requires=['PyYAML'],
      extras_require={'test': ['pytest']},
      entry_points={'console_scripts': ['wds = wds.cli.wds:run']},
      classifiers=CLASSIFIERS,
      cmdclass={'build_py': build},
      zip_safe=False
)
