"""
Correctness checks of full jobs against a straightforward single-pass count
"""

import random
from collections import Counter

import pytest

from mrwordfreq.config import JobConfig
from mrwordfreq.coordinator.partitioner import plan
from mrwordfreq.coordinator.scheduler import JobScheduler
from mrwordfreq.worker.tokenizer import count_tokens

VOCABULARY = ["alpha", "Beta", "gamma", "delta", "café", "naïve", "x2", "über", "e", "zeta"]
SEPARATORS = [" ", "  ", "\n", ", ", ". ", "-", "_", "\t"]


@pytest.fixture
def random_corpus(write_input):
    rng = random.Random(1234)
    parts = []
    for _ in range(1500):
        parts.append(rng.choice(VOCABULARY))
        parts.append(rng.choice(SEPARATORS))
    content = "".join(parts).encode('utf-8')
    return write_input(content, name='random.txt'), content


def expected_counts(content, chunk_size):
    counts = Counter()
    for chunk in plan(len(content), chunk_size):
        counts.update(count_tokens(content[chunk.offset:chunk.end]))
    return dict(counts)


@pytest.mark.integration
class TestCorrectness:

    @pytest.mark.parametrize("chunk_size", [1, 7, 100, 4096, 1 << 20])
    def test_matches_per_chunk_reference(self, random_corpus, chunk_size):
        path, content = random_corpus
        result = JobScheduler(JobConfig(chunk_size=chunk_size, max_workers=4)).run(path)

        assert result.as_dict() == expected_counts(content, chunk_size)

    def test_single_chunk_matches_whole_file_count(self, random_corpus):
        path, content = random_corpus
        result = JobScheduler(JobConfig(chunk_size=len(content))).run(path)

        whole = Counter(count_tokens(content))
        assert result.as_dict() == dict(whole)
        assert result.total() == sum(whole.values())

    def test_output_sorted_by_bytes(self, random_corpus):
        path, _ = random_corpus
        lines = JobScheduler(JobConfig(chunk_size=333)).run(path).to_text().splitlines()
        words = [line.rsplit(':', 1)[0] for line in lines]

        assert words == sorted(words, key=lambda w: w.encode('utf-8'))
        assert len(words) == len(set(words))

    def test_words_are_lowercase(self, random_corpus):
        path, _ = random_corpus
        result = JobScheduler(JobConfig(chunk_size=4096)).run(path)

        assert 'beta' in result.as_dict()
        assert all(word == word.lower() for word in result.words())

    def test_disk_store_with_mmap_reader(self, random_corpus, temp_dir):
        path, content = random_corpus
        config = JobConfig(chunk_size=512, max_workers=3, store='disk', reader='mmap',
                           intermediate_dir=temp_dir + '/records')
        result = JobScheduler(config).run(path)

        assert result.as_dict() == expected_counts(content, 512)
