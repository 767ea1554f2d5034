import os
import sys
import unittest
import cProfile

if __name__ == '__main__':
    testdir = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'test')
    suite = unittest.TestLoader().discover(testdir)
    if 'perf' in sys.argv:
        cProfile.run("unittest.TextTestRunner(verbosity=1).run(suite)", sort='cumtime')
    else:
        unittest.TextTestRunner(verbosity=1).run(suite)
