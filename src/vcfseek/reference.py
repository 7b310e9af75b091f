"""
Reference genome coordinate tables.

A ``ReferenceGenome`` knows its contigs (name, length, order) and how to
translate contig names from the other supported builds (e.g. ``1`` to
``chr1`` for hg19). Three builds are provided: hg19, b37 and hg38.
"""

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from pathlib import PureWindowsPath

from .errors import UnknownContigError

logger = logging.getLogger(__name__)

__all__ = [
    "ContigInfo",
    "ReferenceGenome",
    "b37",
    "hg19",
    "hg38",
    "reference_from_contigs",
    "reference_from_file",
    "reference_from_short_name",
]


@dataclass(frozen=True)
class ContigInfo:
    length: int
    md5: str | None
    order: int


class ReferenceGenome:
    """Contig dictionary plus liftover of contig names from other builds."""

    def __init__(
        self,
        short_name: str,
        leading_chr: bool,
        contigs: Iterable[tuple[str, int, str | None]],
        liftover: Mapping[str, str] | None = None,
    ):
        self.short_name = short_name
        self.leading_chr = leading_chr
        self._seq_dict = {
            name: ContigInfo(length, md5, order)
            for order, (name, length, md5) in enumerate(contigs)
        }
        self._liftover = dict(liftover or {})

    def normalize_contig(self, contig: str) -> str:
        """
        Normalize a contig name for this reference, e.g. ``1`` to ``chr1`` for hg19.

        Raises:
            UnknownContigError: If the name is neither a contig of this
                reference nor a known alias of one.
        """
        if contig in self._seq_dict:
            return contig
        try:
            return self._liftover[contig]
        except KeyError:
            raise UnknownContigError(f"Unknown contig: {contig}") from None

    def compare_contig(self, lhs: str, rhs: str) -> int:
        """Negative, zero or positive as ``lhs`` sorts before, with or after ``rhs``."""
        if lhs == rhs:
            return 0
        try:
            return self._seq_dict[lhs].order - self._seq_dict[rhs].order
        except KeyError:
            raise UnknownContigError(f"One or more unknown contigs: {lhs} or {rhs}") from None

    def contig_order(self, contig: str) -> int:
        try:
            return self._seq_dict[contig].order
        except KeyError:
            raise UnknownContigError(f"Unknown contig: {contig}") from None

    def contig_length(self, contig: str) -> int:
        try:
            return self._seq_dict[contig].length
        except KeyError:
            raise UnknownContigError(f"Unknown contig: {contig}") from None

    def contigs(self) -> list[str]:
        return list(self._seq_dict)

    def __repr__(self) -> str:
        return f"ReferenceGenome({self.short_name!r})"


_HG19_CONTIGS = [
    ("chrM", 16571, "d2ed829b8a1628d16cbeee88e88e39eb"),
    ("chr1", 249250621, "1b22b98cdeb4a9304cb5d48026a85128"),
    ("chr2", 243199373, "a0d9851da00400dec1098a9255ac712e"),
    ("chr3", 198022430, "641e4338fa8d52a5b781bd2a2c08d3c3"),
    ("chr4", 191154276, "23dccd106897542ad87d2765d28a19a1"),
    ("chr5", 180915260, "0740173db9ffd264d728f32784845cd7"),
    ("chr6", 171115067, "1d3a93a248d92a729ee764823acbbc6b"),
    ("chr7", 159138663, "618366e953d6aaad97dbe4777c29375e"),
    ("chr8", 146364022, "96f514a9929e410c6651697bded59aec"),
    ("chr9", 141213431, "3e273117f15e0a400f01055d9f393768"),
    ("chr10", 135534747, "988c28e000e84c26d552359af1ea2e1d"),
    ("chr11", 135006516, "98c59049a2df285c76ffb1c6db8f8b96"),
    ("chr12", 133851895, "51851ac0e1a115847ad36449b0015864"),
    ("chr13", 115169878, "283f8d7892baa81b510a015719ca7b0b"),
    ("chr14", 107349540, "98f3cae32b2a2e9524bc19813927542e"),
    ("chr15", 102531392, "e5645a794a8238215b2cd77acb95a078"),
    ("chr16", 90354753, "fc9b1a7b42b97a864f56b348b06095e6"),
    ("chr17", 81195210, "351f64d4f4f9ddd45b35336ad97aa6de"),
    ("chr18", 78077248, "b15d4b2d29dde9d3e4f93d1d0f2cbc9c"),
    ("chr19", 59128983, "1aacd71f30db8e561810913e0b72636d"),
    ("chr20", 63025520, "0dec9660ec1efaaf33281c0d5ea2560f"),
    ("chr21", 48129895, "2979a6085bfe28e3ad6f552f361ed74d"),
    ("chr22", 51304566, "a718acaa6135fdca8357d5bfe94211dd"),
    ("chrX", 155270560, "7e0e2e580297b7764e31dbc80c2540dd"),
    ("chrY", 59373566, "1e86411d73e6f00a10590f976be01623"),
    ("chr1_gl000191_random", 106433, "d75b436f50a8214ee9c2a51d30b2c2cc"),
    ("chr1_gl000192_random", 547496, "325ba9e808f669dfeee210fdd7b470ac"),
    ("chr4_ctg9_hap1", 590426, "fa24f81b680df26bcfb6d69b784fbe36"),
    ("chr4_gl000193_random", 189789, "dbb6e8ece0b5de29da56601613007c2a"),
    ("chr4_gl000194_random", 191469, "6ac8f815bf8e845bb3031b73f812c012"),
    ("chr6_apd_hap1", 4622290, "fe71bc63420d666884f37a3ad79f3317"),
    ("chr6_cox_hap2", 4795371, "18c17e1641ef04873b15f40f6c8659a4"),
    ("chr6_dbb_hap3", 4610396, "2a3c677c426a10e137883ae1ffb8da3f"),
    ("chr6_mann_hap4", 4683263, "9d51d4152174461cd6715c7ddc588dc8"),
    ("chr6_mcf_hap5", 4833398, "efed415dd8742349cb7aaca054675b9a"),
    ("chr6_qbl_hap6", 4611984, "094d037050cad692b57ea12c4fef790f"),
    ("chr6_ssto_hap7", 4928567, "3b6d666200e72bcc036bf88a4d7e0749"),
    ("chr7_gl000195_random", 182896, "5d9ec007868d517e73543b005ba48535"),
    ("chr8_gl000196_random", 38914, "d92206d1bb4c3b4019c43c0875c06dc0"),
    ("chr8_gl000197_random", 37175, "6f5efdd36643a9b8c8ccad6f2f1edc7b"),
    ("chr9_gl000198_random", 90085, "868e7784040da90d900d2d1b667a1383"),
    ("chr9_gl000199_random", 169874, "569af3b73522fab4b40995ae4944e78e"),
    ("chr9_gl000200_random", 187035, "75e4c8d17cd4addf3917d1703cacaf25"),
    ("chr9_gl000201_random", 36148, "dfb7e7ec60ffdcb85cb359ea28454ee9"),
    ("chr11_gl000202_random", 40103, "06cbf126247d89664a4faebad130fe9c"),
    ("chr17_ctg5_hap1", 1680828, "d89517b400226d3b56e753972a7cad67"),
    ("chr17_gl000203_random", 37498, "96358c325fe0e70bee73436e8bb14dbd"),
    ("chr17_gl000204_random", 81310, "efc49c871536fa8d79cb0a06fa739722"),
    ("chr17_gl000205_random", 174588, "d22441398d99caf673e9afb9a1908ec5"),
    ("chr17_gl000206_random", 41001, "43f69e423533e948bfae5ce1d45bd3f1"),
    ("chr18_gl000207_random", 4262, "f3814841f1939d3ca19072d9e89f3fd7"),
    ("chr19_gl000208_random", 92689, "aa81be49bf3fe63a79bdc6a6f279abf6"),
    ("chr19_gl000209_random", 159169, "f40598e2a5a6b26e84a3775e0d1e2c81"),
    ("chr21_gl000210_random", 27682, "851106a74238044126131ce2a8e5847c"),
    ("chrUn_gl000211", 166566, "7daaa45c66b288847b9b32b964e623d3"),
    ("chrUn_gl000212", 186858, "563531689f3dbd691331fd6c5730a88b"),
    ("chrUn_gl000213", 164239, "9d424fdcc98866650b58f004080a992a"),
    ("chrUn_gl000214", 137718, "46c2032c37f2ed899eb41c0473319a69"),
    ("chrUn_gl000215", 172545, "5eb3b418480ae67a997957c909375a73"),
    ("chrUn_gl000216", 172294, "642a232d91c486ac339263820aef7fe0"),
    ("chrUn_gl000217", 172149, "6d243e18dea1945fb7f2517615b8f52e"),
    ("chrUn_gl000218", 161147, "1d708b54644c26c7e01c2dad5426d38c"),
    ("chrUn_gl000219", 179198, "f977edd13bac459cb2ed4a5457dba1b3"),
    ("chrUn_gl000220", 161802, "fc35de963c57bf7648429e6454f1c9db"),
    ("chrUn_gl000221", 155397, "3238fb74ea87ae857f9c7508d315babb"),
    ("chrUn_gl000222", 186861, "6fe9abac455169f50470f5a6b01d0f59"),
    ("chrUn_gl000223", 180455, "399dfa03bf32022ab52a846f7ca35b30"),
    ("chrUn_gl000224", 179693, "d5b2fc04f6b41b212a4198a07f450e20"),
    ("chrUn_gl000225", 211173, "63945c3e6962f28ffd469719a747e73c"),
    ("chrUn_gl000226", 15008, "1c1b2cd1fccbc0a99b6a447fa24d1504"),
    ("chrUn_gl000227", 128374, "a4aead23f8053f2655e468bcc6ecdceb"),
    ("chrUn_gl000228", 129120, "c5a17c97e2c1a0b6a9cc5a6b064b714f"),
    ("chrUn_gl000229", 19913, "d0f40ec87de311d8e715b52e4c7062e1"),
    ("chrUn_gl000230", 43691, "b4eb71ee878d3706246b7c1dbef69299"),
    ("chrUn_gl000231", 27386, "ba8882ce3a1efa2080e5d29b956568a4"),
    ("chrUn_gl000232", 40652, "3e06b6741061ad93a8587531307057d8"),
    ("chrUn_gl000233", 45941, "7fed60298a8d62ff808b74b6ce820001"),
    ("chrUn_gl000234", 40531, "93f998536b61a56fd0ff47322a911d4b"),
    ("chrUn_gl000235", 34474, "118a25ca210cfbcdfb6c2ebb249f9680"),
    ("chrUn_gl000236", 41934, "fdcd739913efa1fdc64b6c0cd7016779"),
    ("chrUn_gl000237", 45867, "e0c82e7751df73f4f6d0ed30cdc853c0"),
    ("chrUn_gl000238", 39939, "131b1efc3270cc838686b54e7c34b17b"),
    ("chrUn_gl000239", 33824, "99795f15702caec4fa1c4e15f8a29c07"),
    ("chrUn_gl000240", 41933, "445a86173da9f237d7bcf41c6cb8cc62"),
    ("chrUn_gl000241", 42152, "ef4258cdc5a45c206cea8fc3e1d858cf"),
    ("chrUn_gl000242", 43523, "2f8694fc47576bc81b5fe9e7de0ba49e"),
    ("chrUn_gl000243", 43341, "cc34279a7e353136741c9fce79bc4396"),
    ("chrUn_gl000244", 39929, "0996b4475f353ca98bacb756ac479140"),
    ("chrUn_gl000245", 36651, "89bc61960f37d94abf0df2d481ada0ec"),
    ("chrUn_gl000246", 38154, "e4afcd31912af9d9c2546acf1cb23af2"),
    ("chrUn_gl000247", 36422, "7de00226bb7df1c57276ca6baabafd15"),
    ("chrUn_gl000248", 39786, "5a8e43bec9be36c7b49c84d585107776"),
    ("chrUn_gl000249", 38502, "1d78abec37c15fe29a275eb08d5af236"),
]

_B37_CONTIGS = [
    ("1", 249250621, "1b22b98cdeb4a9304cb5d48026a85128"),
    ("2", 243199373, "a0d9851da00400dec1098a9255ac712e"),
    ("3", 198022430, "fdfd811849cc2fadebc929bb925902e5"),
    ("4", 191154276, "23dccd106897542ad87d2765d28a19a1"),
    ("5", 180915260, "0740173db9ffd264d728f32784845cd7"),
    ("6", 171115067, "1d3a93a248d92a729ee764823acbbc6b"),
    ("7", 159138663, "618366e953d6aaad97dbe4777c29375e"),
    ("8", 146364022, "96f514a9929e410c6651697bded59aec"),
    ("9", 141213431, "3e273117f15e0a400f01055d9f393768"),
    ("10", 135534747, "988c28e000e84c26d552359af1ea2e1d"),
    ("11", 135006516, "98c59049a2df285c76ffb1c6db8f8b96"),
    ("12", 133851895, "51851ac0e1a115847ad36449b0015864"),
    ("13", 115169878, "283f8d7892baa81b510a015719ca7b0b"),
    ("14", 107349540, "98f3cae32b2a2e9524bc19813927542e"),
    ("15", 102531392, "e5645a794a8238215b2cd77acb95a078"),
    ("16", 90354753, "fc9b1a7b42b97a864f56b348b06095e6"),
    ("17", 81195210, "351f64d4f4f9ddd45b35336ad97aa6de"),
    ("18", 78077248, "b15d4b2d29dde9d3e4f93d1d0f2cbc9c"),
    ("19", 59128983, "1aacd71f30db8e561810913e0b72636d"),
    ("20", 63025520, "0dec9660ec1efaaf33281c0d5ea2560f"),
    ("21", 48129895, "2979a6085bfe28e3ad6f552f361ed74d"),
    ("22", 51304566, "a718acaa6135fdca8357d5bfe94211dd"),
    ("X", 155270560, "7e0e2e580297b7764e31dbc80c2540dd"),
    ("Y", 59373566, "1fa3474750af0948bdf97d5a0ee52e51"),
    ("MT", 16569, "c68f52674c9fb33aef52dcf399755519"),
    ("GL000207.1", 4262, "f3814841f1939d3ca19072d9e89f3fd7"),
    ("GL000226.1", 15008, "1c1b2cd1fccbc0a99b6a447fa24d1504"),
    ("GL000229.1", 19913, "d0f40ec87de311d8e715b52e4c7062e1"),
    ("GL000231.1", 27386, "ba8882ce3a1efa2080e5d29b956568a4"),
    ("GL000210.1", 27682, "851106a74238044126131ce2a8e5847c"),
    ("GL000239.1", 33824, "99795f15702caec4fa1c4e15f8a29c07"),
    ("GL000235.1", 34474, "118a25ca210cfbcdfb6c2ebb249f9680"),
    ("GL000201.1", 36148, "dfb7e7ec60ffdcb85cb359ea28454ee9"),
    ("GL000247.1", 36422, "7de00226bb7df1c57276ca6baabafd15"),
    ("GL000245.1", 36651, "89bc61960f37d94abf0df2d481ada0ec"),
    ("GL000197.1", 37175, "6f5efdd36643a9b8c8ccad6f2f1edc7b"),
    ("GL000203.1", 37498, "96358c325fe0e70bee73436e8bb14dbd"),
    ("GL000246.1", 38154, "e4afcd31912af9d9c2546acf1cb23af2"),
    ("GL000249.1", 38502, "1d78abec37c15fe29a275eb08d5af236"),
    ("GL000196.1", 38914, "d92206d1bb4c3b4019c43c0875c06dc0"),
    ("GL000248.1", 39786, "5a8e43bec9be36c7b49c84d585107776"),
    ("GL000244.1", 39929, "0996b4475f353ca98bacb756ac479140"),
    ("GL000238.1", 39939, "131b1efc3270cc838686b54e7c34b17b"),
    ("GL000202.1", 40103, "06cbf126247d89664a4faebad130fe9c"),
    ("GL000234.1", 40531, "93f998536b61a56fd0ff47322a911d4b"),
    ("GL000232.1", 40652, "3e06b6741061ad93a8587531307057d8"),
    ("GL000206.1", 41001, "43f69e423533e948bfae5ce1d45bd3f1"),
    ("GL000240.1", 41933, "445a86173da9f237d7bcf41c6cb8cc62"),
    ("GL000236.1", 41934, "fdcd739913efa1fdc64b6c0cd7016779"),
    ("GL000241.1", 42152, "ef4258cdc5a45c206cea8fc3e1d858cf"),
    ("GL000243.1", 43341, "cc34279a7e353136741c9fce79bc4396"),
    ("GL000242.1", 43523, "2f8694fc47576bc81b5fe9e7de0ba49e"),
    ("GL000230.1", 43691, "b4eb71ee878d3706246b7c1dbef69299"),
    ("GL000237.1", 45867, "e0c82e7751df73f4f6d0ed30cdc853c0"),
    ("GL000233.1", 45941, "7fed60298a8d62ff808b74b6ce820001"),
    ("GL000204.1", 81310, "efc49c871536fa8d79cb0a06fa739722"),
    ("GL000198.1", 90085, "868e7784040da90d900d2d1b667a1383"),
    ("GL000208.1", 92689, "aa81be49bf3fe63a79bdc6a6f279abf6"),
    ("GL000191.1", 106433, "d75b436f50a8214ee9c2a51d30b2c2cc"),
    ("GL000227.1", 128374, "a4aead23f8053f2655e468bcc6ecdceb"),
    ("GL000228.1", 129120, "c5a17c97e2c1a0b6a9cc5a6b064b714f"),
    ("GL000214.1", 137718, "46c2032c37f2ed899eb41c0473319a69"),
    ("GL000221.1", 155397, "3238fb74ea87ae857f9c7508d315babb"),
    ("GL000209.1", 159169, "f40598e2a5a6b26e84a3775e0d1e2c81"),
    ("GL000218.1", 161147, "1d708b54644c26c7e01c2dad5426d38c"),
    ("GL000220.1", 161802, "fc35de963c57bf7648429e6454f1c9db"),
    ("GL000213.1", 164239, "9d424fdcc98866650b58f004080a992a"),
    ("GL000211.1", 166566, "7daaa45c66b288847b9b32b964e623d3"),
    ("GL000199.1", 169874, "569af3b73522fab4b40995ae4944e78e"),
    ("GL000217.1", 172149, "6d243e18dea1945fb7f2517615b8f52e"),
    ("GL000216.1", 172294, "642a232d91c486ac339263820aef7fe0"),
    ("GL000215.1", 172545, "5eb3b418480ae67a997957c909375a73"),
    ("GL000205.1", 174588, "d22441398d99caf673e9afb9a1908ec5"),
    ("GL000219.1", 179198, "f977edd13bac459cb2ed4a5457dba1b3"),
    ("GL000224.1", 179693, "d5b2fc04f6b41b212a4198a07f450e20"),
    ("GL000223.1", 180455, "399dfa03bf32022ab52a846f7ca35b30"),
    ("GL000195.1", 182896, "5d9ec007868d517e73543b005ba48535"),
    ("GL000212.1", 186858, "563531689f3dbd691331fd6c5730a88b"),
    ("GL000222.1", 186861, "6fe9abac455169f50470f5a6b01d0f59"),
    ("GL000200.1", 187035, "75e4c8d17cd4addf3917d1703cacaf25"),
    ("GL000193.1", 189789, "dbb6e8ece0b5de29da56601613007c2a"),
    ("GL000194.1", 191469, "6ac8f815bf8e845bb3031b73f812c012"),
    ("GL000225.1", 211173, "63945c3e6962f28ffd469719a747e73c"),
    ("GL000192.1", 547496, "325ba9e808f669dfeee210fdd7b470ac"),
]

# Primary assembly only
_HG38_CONTIGS = [
    ("chr1", 248956422, None),
    ("chr2", 242193529, None),
    ("chr3", 198295559, None),
    ("chr4", 190214555, None),
    ("chr5", 181538259, None),
    ("chr6", 170805979, None),
    ("chr7", 159345973, None),
    ("chr8", 145138636, None),
    ("chr9", 138394717, None),
    ("chr10", 133797422, None),
    ("chr11", 135086622, None),
    ("chr12", 133275309, None),
    ("chr13", 114364328, None),
    ("chr14", 107043718, None),
    ("chr15", 101991189, None),
    ("chr16", 90338345, None),
    ("chr17", 83257441, None),
    ("chr18", 80373285, None),
    ("chr19", 58617616, None),
    ("chr20", 64444167, None),
    ("chr21", 46709983, None),
    ("chr22", 50818468, None),
    ("chrX", 156040895, None),
    ("chrY", 57227415, None),
    ("chrM", 16569, None),
]

_NUMBERED = [str(n) for n in range(1, 23)] + ["X", "Y"]

# Bare names (b37 style) to UCSC style, used by hg19 and hg38
_TO_UCSC = {"MT": "chrM", **{name: f"chr{name}" for name in _NUMBERED}}

_TO_B37 = {"chrM": "MT", **{f"chr{name}": name for name in _NUMBERED}}

hg19 = ReferenceGenome("hg19", True, _HG19_CONTIGS, _TO_UCSC)
b37 = ReferenceGenome("b37", False, _B37_CONTIGS, _TO_B37)
hg38 = ReferenceGenome("hg38", True, _HG38_CONTIGS, _TO_UCSC)

DEFAULT_REFERENCE = hg19

_REFERENCES = (hg19, b37, hg38)

_FILE_NAMES = {
    "human_g1k_v37.fasta": b37,
    "GRCh37.fa": b37,
    "ucsc.hg19.fasta": hg19,
    "hg19.fa": hg19,
    "Homo_sapiens_assembly38.fasta": hg38,
}

_SHORT_NAMES = {
    "hg19": hg19,
    "b37": b37,
    "hg38": hg38,
    "GRCh38.p2": hg38,
}


def reference_from_file(filename: str) -> ReferenceGenome | None:
    """Map a reference FASTA path or URL (``/`` or ``\\`` separated) by its basename."""
    return _FILE_NAMES.get(PureWindowsPath(filename).name)


def reference_from_contigs(contigs: Iterable[str]) -> ReferenceGenome | None:
    """The only reference containing every contig, or None if zero or several do."""
    wanted = set(contigs)
    matches = [ref for ref in _REFERENCES if wanted <= set(ref.contigs())]
    return matches[0] if len(matches) == 1 else None


def reference_from_short_name(short_name: str) -> ReferenceGenome | None:
    return _SHORT_NAMES.get(short_name)
