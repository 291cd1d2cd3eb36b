"""
Four-character tag tables for the RBBF format.

Two lookups are needed during a conversion:

- block tags (the type code in each block header) to XML element type names. This table depends on the container
  format version: format 2 knows one block type that format 1 does not.
- field tags (the name of each tagged item inside a block) to XML element names. This table is the same for both
  format versions. Some known tags map to the empty name, meaning that the item is consumed but not emitted.

The tables are built by `build_tag_tables()` and are read-only, so a `TagTables` object can be shared freely.
"""

from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType
from typing import Mapping, Optional

from .errors import MalformedHeaderError, UnknownBlockTagError


SUPPORTED_FORMAT_VERSIONS = (1, 2)


class GroupKind(Enum):
    NAMED = auto()
    WRAPPER = auto()
    SKIPPED = auto()
    PROPERTY_VALUE = auto()


@dataclass(frozen=True)
class SpecialTag:
    kind: GroupKind
    name: str = ''


@dataclass(frozen=True)
class TagTables:
    format_version: int
    block_tags: Mapping[str, str]
    field_tags: Mapping[str, str]

    def block_name(self, tag: str) -> str:
        name = self.block_tags.get(tag)
        if name is None:
            raise UnknownBlockTagError(tag, self.format_version)

        return name

    def field_name(self, tag: str) -> Optional[str]:
        """
        Returns the XML element name for a field tag, ``''`` for a known tag that is never emitted, or None for a tag
        that is not known at all.
        """
        return self.field_tags.get(tag)


def build_tag_tables(format_version: int) -> TagTables:
    if format_version not in SUPPORTED_FORMAT_VERSIONS:
        raise MalformedHeaderError(
            f"Unsupported format version {format_version} (supported: "
            f"{', '.join(str(v) for v in SUPPORTED_FORMAT_VERSIONS)})"
        )

    block_tags = dict(_FORMAT_1_BLOCK_TAGS)
    if format_version >= 2:
        block_tags.update(_FORMAT_2_EXTRA_BLOCK_TAGS)

    return TagTables(
        format_version=format_version,
        block_tags=MappingProxyType(block_tags),
        field_tags=_FIELD_TAGS,
    )


_FORMAT_1_BLOCK_TAGS = {
    'Aicn': 'ApplicationIcon',
    'BSbu': 'BuildProjectStep',
    'BScf': 'CopyFilesStep',
    'Bsls': 'BuildStepsList',
    'BSsc': 'IDEScriptStep',
    'BSsn': 'SignProjectScriptStep',
    'BSts': 'BuildAutomation',
    'colr': 'ColorAsset',
    'IEsx': 'ExternalScriptStep',
    'Img ': 'MultiImage',
    'ioLS': 'IOSLaunchScreen',
    'iosv': 'IOSView',
    'Limg': 'LaunchImages',
    'mobv': 'MobileScreen',
    'pExt': 'ExternalCode',
    'pFol': 'Folder',
    'pFTy': 'FileTypes',
    'pLay': 'IOSLayout',
    'pMnu': 'Menu',
    'pObj': 'Module',
    'Proj': 'Project',
    'pRpt': 'Report',
    'pScn': 'IOSScreen',
    'pTbr': 'Toolbar',
    'pUIs': 'UIState',
    'pVew': 'Window',
    'pWPg': 'WebPage',
    'pWSe': 'WebSession',
    'pWSt': 'WebStyle',
    'WrKr': 'Worker',
    'xWbC': 'WebContainer',
    'xWbV': 'WebView',
    'xWSs': 'WebSession',
}

_FORMAT_2_EXTRA_BLOCK_TAGS = {
    'pDWn': 'DesktopWindow',
}

_FIELD_TAGS = MappingProxyType({
    'aivi': 'AutoIncVersion',
    'Alas': 'AliasName',
    'alis': 'FileAlias',
    'Arch': '',
    'bApO': 'IsApplicationObject',
    'BCar': 'BuildCarbonMachOName',
    'bCls': 'IsClass',
    'BCMO': 'BuildCarbonMachOName',
    'bFAS': 'BuildForAppStore',
    'Bflg': 'BuildFlags',
    'bhlp': 'ItemHelp',
    'binE': 'BinaryEnum',
    'BL86': 'BuildLinuxX86Name',
    'BMac': '',
    'BMDI': 'BuildWinMDI',
    'BMSz': '',
    'bNtr': 'IsInterface',
    'BSiz': '',
    'BunI': 'BundleIdentifier',
    'BWin': 'BuildWinName',
    'CBix': 'ControlIndex',
    'ccls': 'ControlClass',
    'Ci1a': 'HLCItem1Attr',
    'Ci2a': 'HLCItem2Attr',
    'CLan': 'CurrentLanguage',
    'clr1': 'ColorLight',
    'clr2': 'ColorDark',
    'clrp': 'ColorPlatform',
    'clrt': 'ColorType',
    'cnfT': 'ConformsTo',
    'Cni1': 'HLCItem1',
    'Cni2': 'HLCItem2',
    'CnLk': 'HLCEditable',
    'CnMP': 'HLCScale',
    'CnPr': 'HLCPriority',
    'CnPv': 'HLCValue',
    'CnRo': 'HLCRelOp',
    'comM': 'Comment',
    'Comp': 'Compatibility',
    'Cont': 'ObjContainerID',
    'cRDW': 'CopyWindowsRedist',
    'data': 'ItemData',
    'decl': 'ItemDeclaration',
    'defn': 'ItemDef',
    'DEnc': 'DefaultEncoding',
    'Dest': 'Subdirectory',
    'deVi': 'Device',
    'devT': 'DeviceType',
    'DgCL': 'DebuggerCommandLine',
    'dhlp': '',
    'dkmd': 'DarkMode',
    'DLan': 'DefaultLanguage',
    'dscR': 'Description',
    'DstR': 'Destination',
    'DVew': 'DefaultViewID',
    'Edpt': 'EditingPartID',
    'enbl': 'Enabled',
    'Enco': 'TextEncoding',
    'EnVv': 'EnvVars',
    'eSpt': '',
    'flag': 'ItemFlags',
    'FTpt': 'FilePhysicalType',
    'FTRk': 'FileRank',
    'GDIp': 'UseGDIPlus',
    'HCla': 'HCLActive',
    'HCnm': 'HLCName',
    'hidp': 'HiDPI',
    'iArc': 'IOSArchitecture',
    'Icon': 'Icon',
    'iDDv': 'IOSDebugDevice',
    'IDEv': 'IDEVersion',
    'iLck': 'Locked',
    'imPo': 'Imported',
    'indx': 'ItemIndex',
    'Intr': 'Interfaces',
    'ioPP': 'ProvisioningProfileName',
    'iOri': 'IOSLayoutEditorViewOrientation',
    'iOsC': 'IOSCapabilities',
    'isBn': 'BuildiOSName',
    'itHd': 'HeightDouble',
    'itHt': 'Height',
    'itWd': 'Width',
    'itwD': 'WidthDouble',
    'IVer': 'InfoVersion',
    'iVTy': 'IOSLayoutEditorViewType',
    'kUTI': 'UTIType',
    'lang': 'ItemLanguage',
    'Lib ': 'LibraryName',
    'linA': 'LinuxArchitecture',
    'lncs': '',
    'lstH': '',
    'lstV': '',
    'LVer': 'LongVersion',
    'macA': 'MacArchitecture',
    'MacC': 'MacCreator',
    'maEn': 'MenuAutoEnable',
    'MaxW': 'WindowMaximized',
    'MDIc': 'WinMDICaption',
    'MiMk': 'MenuShortcutModifier',
    'mimT': 'MimeType',
    'MiSK': 'MenuShortcut',
    'mVis': 'MenuItemVisible',
    'name': 'ItemName',
    'Name': 'ObjName',
    'ndsc': '',
    'ndsr': '',
    'NnRl': 'NonRelease',
    'ntln': 'NoteLine',
    'objC': 'ObjectiveC',
    'ocls': 'WebObjectClass',
    'OPSp': '',
    'oPtL': 'OptimizationLevel',
    'orie': 'Orientation',
    'Padn': '',
    'parm': 'ItemParams',
    'pasw': '',
    'path': 'FullPath',
    'PDef': 'PropertyVal',
    'plFM': 'Platform',
    'pltf': 'ItemPlatform',
    'ppth': 'PartialPath',
    'PrGp': 'PropertyGroup',
    'prTp': 'ProjectType',
    'prWA': 'WebApp',
    'PSIV': 'ProjectSavedInVers',
    'PtID': 'PartID',
    'PVal': 'PropertyValue',
    'rEdt': 'EditBounds',
    'Regn': 'Region',
    'Rels': 'Release',
    'resZ': 'Resolution',
    'rslt': 'ItemResult',
    'runA': 'WindowsRunAs',
    'SCtx': 'ScriptText',
    'scut': 'ItemShortcut',
    'SEdC': 'EditorCount',
    'SEId': 'EditorIndex',
    'SELn': 'EditorLocation',
    'SEPt': 'EditorPath',
    'shrd': 'IsShared',
    'size': '',
    'Size': '',
    'Soft': 'SoftLink',
    'spmu': 'ItemSpecialMenu',
    'srcl': 'SourceLine',
    'StpA': 'StepAppliesTo',
    'stsc': '',
    'stsr': '',
    'StST': 'SelectedTab',
    'styl': 'ItemStyle',
    'Supr': 'Superclass',
    'SVer': 'ShortVersion',
    'svin': 'SaveInfo',
    'SySF': 'SystemFlags',
    'Targ': 'Target',
    'text': 'ItemText',
    'TVew': 'DefaultTabletViewID',
    'type': 'ItemType',
    'UsBF': 'UseBuildsFolder',
    'Usin': 'GlobalUsingClauses',
    'vbET': 'EditorType',
    'Ver1': 'MajorVersion',
    'Ver2': 'MinorVersion',
    'Ver3': 'SubVersion',
    'Vsbl': 'Visible',
    'VwBh': 'ViewBehavior',
    'WbAn': 'WebHostingAppName',
    'WbDS': 'WebDisconnectString',
    'WbHd': 'WebHostingDomain',
    'WbHI': 'WebHostingIdentifier',
    'WbLS': 'WebLaunchString',
    'WcmN': 'BuildWinCompanyName',
    'Wdpt': 'WebDebugPort',
    'Web2': 'WebVersion',
    'WHTM': 'WebHTMLHeader',
    'WiFd': 'BuildWinFileDescription',
    'winA': 'WindowsArchitecture',
    'WiNm': 'BuildWinInternalName',
    'wInV': 'WebControlInitialValue',
    'WinV': 'WindowsVersions',
    'Wpcl': 'WebProtocol',
    'WpNm': 'BuildWinProductName',
    'Wprt': 'WebPort',
    'WptS': 'WebSecurePort',
    'WSSI': 'WebStyleStateID',
})


def _named(name: str) -> SpecialTag:
    return SpecialTag(GroupKind.NAMED, name)


# Tags that may introduce a nested group. If such a tag turns out not to be followed by a group frame, it is decoded as
# an ordinary field.
SPECIAL_TAGS: Mapping[str, SpecialTag] = MappingProxyType({
    'CBhv': _named('ControlBehavior'),
    'CIns': _named('ConstantInstance'),
    'clrR': _named('ColorRepresentation'),
    'Cnst': _named('Constant'),
    'CPal': SpecialTag(GroupKind.SKIPPED, 'ColorPalette'),
    'CPrg': _named('GetAccessor'),
    'CPrs': _named('SetAccessor'),
    'Ctrl': _named('Control'),
    'Dmth': _named('DelegateDeclaration'),
    'elem': _named('Element'),
    'Enum': _named('Enumeration'),
    'fTyp': _named('FileType'),
    'HIns': _named('HookInstance'),
    'HLCn': _named('HighLevelConstraint'),
    'Hook': _named('Hook'),
    'Icon': _named('Icon'),
    'ImgR': _named('ImageRepresentation'),
    'ImgS': _named('ImageSpecification'),
    'iSCI': _named('ScreenContentItem'),
    'Meth': _named('Method'),
    'MItm': _named('MenuItem'),
    'MnuH': _named('MenuHandler'),
    'Note': _named('Note'),
    'PDef': SpecialTag(GroupKind.PROPERTY_VALUE, 'PropertyVal'),
    'Prop': _named('Property'),
    'Rpsc': _named('ReportSection'),
    'SEdr': _named('Editor'),
    'SEds': _named('Editors'),
    'segC': _named('SegmentedControl'),
    'sorc': _named('ItemSource'),
    'Strx': _named('Structure'),
    'SwSt': _named('StudioWindowState'),
    'ti  ': _named('ToolItem'),
    'USng': _named('Using'),
    'VwBh': _named('ViewBehavior'),
    'VwPr': _named('ViewProperty'),
    'WrnP': _named('WarningPreferences'),
    'WSSG': _named('WebStyleStateGroup'),
    'XMth': _named('ExternalMethod'),
    'FDef': SpecialTag(GroupKind.WRAPPER),
    'Dseg': _named('DesktopSegmentedButton'),
})
