import threading
import unittest

from refinement_core.rwlock import ReadWriteLock


class TestReadWriteLock(unittest.TestCase):
    def test_readers_share_the_lock(self):
        lock = ReadWriteLock()
        inside = threading.Event()

        def reader():
            with lock.read():
                inside.set()

        with lock.read():
            thread = threading.Thread(target=reader)
            thread.start()
            self.assertTrue(inside.wait(2.0))
        thread.join(2.0)

    def test_writer_waits_for_readers(self):
        lock = ReadWriteLock()
        written = threading.Event()

        def writer():
            with lock.write():
                written.set()

        with lock.read():
            thread = threading.Thread(target=writer)
            thread.start()
            self.assertFalse(written.wait(0.1))
        self.assertTrue(written.wait(2.0))
        thread.join(2.0)

    def test_readers_wait_for_writer(self):
        lock = ReadWriteLock()
        read = threading.Event()

        def reader():
            with lock.read():
                read.set()

        with lock.write():
            thread = threading.Thread(target=reader)
            thread.start()
            self.assertFalse(read.wait(0.1))
        self.assertTrue(read.wait(2.0))
        thread.join(2.0)


if __name__ == "__main__":
    unittest.main()
